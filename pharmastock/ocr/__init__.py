"""Text detection backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import ScannerConfig

TRANSCRIPTION_PROMPT = """\
This image shows pharmaceutical packaging (box, blister or label).
Transcribe ALL printed text exactly as it appears, line by line.
Keep lot codes, expiration dates and abbreviations such as LOTE, VTO, EXP,
ENE, ABR or DIC unchanged; do not translate, correct or reformat anything.
Return only the transcribed text, with no commentary.
If the image contains no readable text, return an empty response.
"""


def guess_media_type(data: bytes) -> str:
    """Guess an image MIME type from its magic bytes (defaults to JPEG)."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return "image/jpeg"


def clean_transcription(text: str) -> str | None:
    """Strip markdown fences a model may wrap around the transcribed text."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned or None


class TextDetector(ABC):
    """Abstract base for recognizing the text printed on one package photo."""

    @abstractmethod
    async def detect_text(self, image: bytes) -> str | None:
        """Return the full recognized text, or None if nothing was found."""
        ...


def create_detector(config: ScannerConfig) -> TextDetector:
    """Create a text detection backend based on configuration."""
    backend_name = config.ocr.backend

    match backend_name:
        case "google":
            from .google_vision import GoogleVisionDetector

            google = config.ocr.google
            return GoogleVisionDetector(
                credentials_path=google.credentials_path,
                project_id=google.project_id,
                client_email=google.client_email,
                private_key=google.private_key,
            )
        case "claude":
            from .claude import ClaudeTextDetector

            return ClaudeTextDetector(
                api_key=config.ocr.claude.api_key,
                model=config.ocr.claude.model,
            )
        case "gemini":
            from .gemini import GeminiTextDetector

            return GeminiTextDetector(
                api_key=config.ocr.gemini.api_key,
                model=config.ocr.gemini.model,
            )
        case _:
            raise ValueError(
                f"Backend OCR desconocido: {backend_name!r}  "
                f"(elija entre google / claude / gemini)"
            )
