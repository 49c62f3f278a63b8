"""Google Cloud Vision text detection backend."""

from __future__ import annotations

import asyncio
import logging

from . import TextDetector

logger = logging.getLogger(__name__)

_TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleVisionDetector(TextDetector):
    """Recognize package text with the Cloud Vision ``text_detection`` API.

    Credentials are taken, in order, from an explicit service account
    (client email + private key), a service account JSON file, or the
    application default credentials of the environment.
    """

    def __init__(
        self,
        credentials_path: str = "",
        project_id: str = "",
        client_email: str = "",
        private_key: str = "",
    ) -> None:
        self._credentials_path = credentials_path
        self._project_id = project_id
        self._client_email = client_email
        self._private_key = private_key
        self._client = None

    def _get_client(self):
        if self._client is not None:
            return self._client

        try:
            from google.cloud import vision
            from google.oauth2 import service_account
        except ImportError:
            raise ImportError(
                "google-cloud-vision is required: pip install 'pharmastock[google]'"
            ) from None

        credentials = None
        if self._client_email and self._private_key:
            credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "project_id": self._project_id,
                    "client_email": self._client_email,
                    "private_key": self._private_key,
                    "token_uri": _TOKEN_URI,
                }
            )
        elif self._credentials_path:
            credentials = service_account.Credentials.from_service_account_file(
                self._credentials_path
            )

        self._client = vision.ImageAnnotatorClient(credentials=credentials)
        return self._client

    def _detect(self, image: bytes) -> str | None:
        from google.cloud import vision

        client = self._get_client()
        response = client.text_detection(image=vision.Image(content=image))
        if response.error.message:
            raise RuntimeError(f"Cloud Vision error: {response.error.message}")

        annotations = response.text_annotations
        if not annotations:
            logger.info("Cloud Vision found no text in image")
            return None
        # The first annotation holds the full text; the rest are single words
        return annotations[0].description or None

    async def detect_text(self, image: bytes) -> str | None:
        return await asyncio.to_thread(self._detect, image)
