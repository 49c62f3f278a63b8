"""Gemini API text detection backend."""

from __future__ import annotations

from . import TRANSCRIPTION_PROMPT, TextDetector, clean_transcription, guess_media_type


class GeminiTextDetector(TextDetector):
    """Transcribe package text using Google Gemini's vision capability."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def detect_text(self, image: bytes) -> str | None:
        if not self._api_key:
            raise ValueError(
                "No se configuró la API key de Gemini. "
                "Revise el archivo de configuración o la variable GEMINI_API_KEY."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install 'pharmastock[gemini]'"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        parts = [
            {"mime_type": guess_media_type(image), "data": image},
            TRANSCRIPTION_PROMPT,
        ]
        response = await model.generate_content_async(parts)
        return clean_transcription(response.text)
