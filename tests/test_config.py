"""Tests for scanner config loading."""

import os
import tempfile

import pytest

from pharmastock.config import ScannerConfig, load_config

_SECRET_VARS = (
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_VISION_PROJECT_ID",
    "GOOGLE_VISION_CLIENT_EMAIL",
    "GOOGLE_VISION_PRIVATE_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _SECRET_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _write_toml(content: bytes) -> str:
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(content)
        f.flush()
    return f.name


def test_load_config_defaults(clean_env):
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, ScannerConfig)
    assert config.camera.index == 0
    assert config.camera.save_dir == "/tmp/pharmastock"
    assert config.ocr.backend == "google"
    assert config.ocr.claude.api_key == ""
    assert config.ocr.gemini.model == "gemini-2.0-flash"
    assert config.ocr.google.credentials_path == ""
    assert config.alerts.months == 3
    assert config.scan.max_images == 3


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.alerts.months == 3


def test_load_config_from_toml(clean_env):
    """Loading a valid TOML file populates config."""
    path = _write_toml(b"""\
[camera]
index = 2
save_dir = "/var/pharmastock"

[ocr]
backend = "gemini"

[ocr.gemini]
api_key = "test-key-123"
model = "gemini-pro"

[ocr.google]
credentials_path = "/etc/pharmastock/sa.json"

[alerts]
months = 6

[scan]
max_images = 2
""")
    config = load_config(path)
    os.unlink(path)

    assert config.camera.index == 2
    assert config.camera.save_dir == "/var/pharmastock"
    assert config.ocr.backend == "gemini"
    assert config.ocr.gemini.api_key == "test-key-123"
    assert config.ocr.gemini.model == "gemini-pro"
    assert config.ocr.google.credentials_path == "/etc/pharmastock/sa.json"
    assert config.alerts.months == 6
    assert config.scan.max_images == 2


def test_load_config_env_override(clean_env):
    """Environment variables fill in empty secrets."""
    clean_env.setenv("ANTHROPIC_API_KEY", "env-anthropic-key")
    clean_env.setenv("GEMINI_API_KEY", "env-gemini-key")
    clean_env.setenv("GOOGLE_VISION_PROJECT_ID", "pharma-prj")
    clean_env.setenv("GOOGLE_VISION_CLIENT_EMAIL", "ocr@pharma-prj.iam.gserviceaccount.com")
    clean_env.setenv("GOOGLE_VISION_PRIVATE_KEY", "-----BEGIN-----\\nabc\\n-----END-----")

    config = load_config()
    assert config.ocr.claude.api_key == "env-anthropic-key"
    assert config.ocr.gemini.api_key == "env-gemini-key"
    assert config.ocr.google.project_id == "pharma-prj"
    assert config.ocr.google.client_email == "ocr@pharma-prj.iam.gserviceaccount.com"
    assert config.ocr.google.private_key == "-----BEGIN-----\nabc\n-----END-----"


def test_load_config_file_key_takes_precedence(clean_env):
    """Config file API key takes precedence over env var."""
    clean_env.setenv("ANTHROPIC_API_KEY", "env-key")
    path = _write_toml(b"""\
[ocr.claude]
api_key = "file-key"
""")
    config = load_config(path)
    os.unlink(path)
    assert config.ocr.claude.api_key == "file-key"


def test_load_config_partial_toml():
    """Partial TOML uses defaults for missing sections."""
    path = _write_toml(b"""\
[alerts]
months = 1
""")
    config = load_config(path)
    os.unlink(path)
    assert config.alerts.months == 1
    assert config.ocr.backend == "google"
    assert config.scan.max_images == 3


@pytest.mark.parametrize("months", [0, 13])
def test_load_config_alert_months_out_of_range(months):
    path = _write_toml(f"[alerts]\nmonths = {months}\n".encode())
    try:
        with pytest.raises(ValueError, match="alerts.months"):
            load_config(path)
    finally:
        os.unlink(path)


@pytest.mark.parametrize("value", ['"3"', "3.5", "true"])
def test_load_config_alert_months_not_an_integer(value):
    path = _write_toml(f"[alerts]\nmonths = {value}\n".encode())
    try:
        with pytest.raises(ValueError, match="alerts.months debe ser un número entero"):
            load_config(path)
    finally:
        os.unlink(path)


@pytest.mark.parametrize("value", ["0", "-1", '"2"'])
def test_load_config_max_images_must_be_positive(value):
    path = _write_toml(f"[scan]\nmax_images = {value}\n".encode())
    try:
        with pytest.raises(ValueError, match="scan.max_images"):
            load_config(path)
    finally:
        os.unlink(path)
