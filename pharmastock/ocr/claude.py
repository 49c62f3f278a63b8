"""Claude API text detection backend."""

from __future__ import annotations

import base64

from . import TRANSCRIPTION_PROMPT, TextDetector, clean_transcription, guess_media_type


class ClaudeTextDetector(TextDetector):
    """Transcribe package text using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def detect_text(self, image: bytes) -> str | None:
        if not self._api_key:
            raise ValueError(
                "No se configuró la API key de Anthropic. "
                "Revise el archivo de configuración o la variable ANTHROPIC_API_KEY."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install 'pharmastock[claude]'"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": guess_media_type(image),
                    "data": base64.standard_b64encode(image).decode(),
                },
            },
            {"type": "text", "text": TRANSCRIPTION_PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=2048,
            messages=[{"role": "user", "content": content}],
        )

        return clean_transcription(response.content[0].text)

