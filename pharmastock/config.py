"""TOML configuration loader for the scanner."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .status import check_alert_months

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class CameraConfig:
    index: int = 0
    save_dir: str = "/tmp/pharmastock"


@dataclass
class GoogleVisionConfig:
    credentials_path: str = ""
    project_id: str = ""
    client_email: str = ""
    private_key: str = ""


@dataclass
class ClaudeOCRConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiOCRConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class OCRConfig:
    backend: str = "google"
    google: GoogleVisionConfig = field(default_factory=GoogleVisionConfig)
    claude: ClaudeOCRConfig = field(default_factory=ClaudeOCRConfig)
    gemini: GeminiOCRConfig = field(default_factory=GeminiOCRConfig)


@dataclass
class AlertConfig:
    months: int = 3


@dataclass
class ScanConfig:
    max_images: int = 3


@dataclass
class ScannerConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)


def _validate_alert_months(months: object) -> int:
    return check_alert_months(months, "alerts.months")


def _validate_max_images(count: object) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValueError(
            f"scan.max_images debe ser un entero mayor que 0 (valor: {count!r})"
        )
    return count


def load_config(path: str | Path | None = None) -> ScannerConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys and Google credentials can be supplied via environment variables.

    Raises:
        ValueError: If ``alerts.months`` is not an integer from 1 to 12 or
            ``scan.max_images`` is not a positive integer.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cam = raw.get("camera", {})
    ocr = raw.get("ocr", {})
    alr = raw.get("alerts", {})
    scn = raw.get("scan", {})

    google_cfg = ocr.get("google", {})
    claude_cfg = ocr.get("claude", {})
    gemini_cfg = ocr.get("gemini", {})

    # Resolve secrets: config file → environment variable
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    credentials_path = google_cfg.get("credentials_path", "") or os.environ.get(
        "GOOGLE_APPLICATION_CREDENTIALS", ""
    )
    project_id = google_cfg.get("project_id", "") or os.environ.get(
        "GOOGLE_VISION_PROJECT_ID", ""
    )
    client_email = google_cfg.get("client_email", "") or os.environ.get(
        "GOOGLE_VISION_CLIENT_EMAIL", ""
    )
    # Keys stored in env files usually carry escaped newlines
    private_key = (
        google_cfg.get("private_key", "")
        or os.environ.get("GOOGLE_VISION_PRIVATE_KEY", "")
    ).replace("\\n", "\n")

    return ScannerConfig(
        camera=CameraConfig(
            index=cam.get("index", 0),
            save_dir=cam.get("save_dir", "/tmp/pharmastock"),
        ),
        ocr=OCRConfig(
            backend=ocr.get("backend", "google"),
            google=GoogleVisionConfig(
                credentials_path=credentials_path,
                project_id=project_id,
                client_email=client_email,
                private_key=private_key,
            ),
            claude=ClaudeOCRConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiOCRConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
        ),
        alerts=AlertConfig(
            months=_validate_alert_months(alr.get("months", 3)),
        ),
        scan=ScanConfig(
            max_images=_validate_max_images(scn.get("max_images", 3)),
        ),
    )
