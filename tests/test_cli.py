"""Tests for the command line interface."""

import io
import logging
import sys
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pharmastock.cli import main


@pytest.fixture
def detector():
    mock = MagicMock()
    mock.detect_text = AsyncMock(side_effect=["01/2025", "XYZ999"])
    with patch("pharmastock.cli.create_detector", return_value=mock):
        yield mock


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_status_command(capsys):
    main(["status", "2025-04-15", "--alert-months", "3", "--today", "2025-01-15"])
    out = capsys.readouterr().out
    assert out.strip() == "expiring_soon\tPor vencer"


def test_status_uses_configured_alert_window(tmp_path, capsys):
    config = tmp_path / "pharmastock.toml"
    config.write_text("[alerts]\nmonths = 1\n")
    main(["-c", str(config), "status", "2025-04-15", "--today", "2025-01-15"])
    assert capsys.readouterr().out.startswith("valid")


def test_status_rejects_bad_date(capsys):
    with pytest.raises(SystemExit):
        main(["status", "15/04/2025"])
    assert "fecha inválida" in capsys.readouterr().err


def test_extract_command_json(tmp_path, capsys):
    text_file = tmp_path / "ocr.txt"
    text_file.write_text("LOTE: AB123456\nEXP 04/2026\n", encoding="utf-8")

    main(["extract", str(text_file), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert data == {
        "productCode": "AB123456",
        "expirationDateText": "04/2026",
        "expirationDate": "2026-04-30",
    }


def test_extract_command_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("ABR2026"))
    main(["extract"])
    out = capsys.readouterr().out
    assert "2026-04-30" in out


def test_scan_with_images_json(tmp_path, capsys, detector):
    paths = []
    for name in ("a.jpg", "b.jpg"):
        p = tmp_path / name
        p.write_bytes(b"\xff\xd8" + name.encode())
        paths.append(str(p))

    main(["scan", "--image", *paths, "--json"])

    data = json.loads(capsys.readouterr().out)
    assert data["success"] is True
    assert data["productCode"] == "XYZ999"
    assert data["expirationDate"] == "2025-01-31"
    assert data["expirationStatus"] == "expired"
    assert detector.detect_text.await_count == 2


def test_scan_drops_images_over_limit(tmp_path, capsys, detector):
    paths = []
    for i in range(4):
        p = tmp_path / f"{i}.jpg"
        p.write_bytes(b"\xff\xd8")
        paths.append(str(p))
    detector.detect_text.side_effect = ["a", "b", "c", "d"]

    with pytest.raises(SystemExit) as exc:
        main(["scan", "--image", *paths])

    assert exc.value.code == 1
    assert detector.detect_text.await_count == 3
    assert "No se detectó información" in capsys.readouterr().err


def test_scan_missing_image_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["scan", "--image", str(tmp_path / "missing.jpg")])
    assert exc.value.code == 1
    assert "No se pudo leer la imagen" in capsys.readouterr().err


@pytest.fixture
def camera_config(tmp_path):
    config = tmp_path / "pharmastock.toml"
    config.write_text(f'[camera]\nsave_dir = "{tmp_path / "shots"}"\n')
    return str(config)


def test_scan_camera_that_will_not_open(camera_config, monkeypatch, capsys):
    cv2 = MagicMock()
    cv2.VideoCapture.return_value.isOpened.return_value = False
    monkeypatch.setattr("builtins.input", lambda prompt="": "")

    with patch.dict(sys.modules, {"cv2": cv2}):
        with pytest.raises(SystemExit) as exc:
            main(["-c", camera_config, "scan", "--count", "1"])

    assert exc.value.code == 1
    assert "No se pudo abrir la cámara 0" in capsys.readouterr().err


def test_scan_without_opencv(camera_config, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "")

    with patch.dict(sys.modules, {"cv2": None}):
        with pytest.raises(SystemExit) as exc:
            main(["-c", camera_config, "scan", "--count", "1"])

    assert exc.value.code == 1
    assert "opencv-python" in capsys.readouterr().err


def test_cameras_without_opencv(capsys):
    with patch.dict(sys.modules, {"cv2": None}):
        with pytest.raises(SystemExit) as exc:
            main(["cameras"])

    assert exc.value.code == 1
    assert "opencv-python" in capsys.readouterr().err


def test_extract_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["extract", str(tmp_path / "nope.txt")])
    assert exc.value.code == 1
    assert "No se pudo leer el archivo" in capsys.readouterr().err


@pytest.mark.parametrize("months", ["0", "13"])
def test_status_rejects_alert_months_out_of_range(months, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["status", "2025-04-15", "--alert-months", months])
    assert exc.value.code == 1
    assert "--alert-months debe estar entre 1 y 12" in capsys.readouterr().err


def test_scan_rejects_alert_months_before_detection(tmp_path, capsys, detector):
    image = tmp_path / "a.jpg"
    image.write_bytes(b"\xff\xd8")

    with pytest.raises(SystemExit) as exc:
        main(["scan", "--image", str(image), "--alert-months", "13"])

    assert exc.value.code == 1
    assert detector.detect_text.await_count == 0
    assert "--alert-months debe estar entre 1 y 12" in capsys.readouterr().err


def test_invalid_log_level_falls_back_to_warning(monkeypatch, capsys):
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    with patch("pharmastock.cli.logging.basicConfig") as basic_config:
        main(["status", "2025-04-15", "--alert-months", "3", "--today", "2025-01-15"])

    assert basic_config.call_args.kwargs["level"] == logging.WARNING
    assert capsys.readouterr().out.startswith("expiring_soon")


def test_log_level_from_dotenv_is_applied(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    def fake_load_dotenv():
        monkeypatch.setenv("LOG_LEVEL", "error")

    with patch("pharmastock.cli.load_dotenv", side_effect=fake_load_dotenv), \
            patch("pharmastock.cli.logging.basicConfig") as basic_config:
        main(["status", "2025-04-15", "--today", "2025-01-15"])

    assert basic_config.call_args.kwargs["level"] == logging.ERROR
