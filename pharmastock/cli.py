"""CLI entry point for the pharmacy stock scanner."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from .camera import PackageCamera
from .config import load_config
from .extraction import extract_fields
from .ocr import create_detector
from .scanner import ExpirationScanner
from .status import ExpirationStatus, check_alert_months, classify, status_label

logger = logging.getLogger(__name__)

_STATUS_MARKS = {
    ExpirationStatus.VALID: "✅",
    ExpirationStatus.EXPIRING_SOON: "⚠️",
    ExpirationStatus.EXPIRED: "⛔",
}


def _setup_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        # getLevelName returns a string for unknown names
        level = logging.getLevelName(os.environ.get("LOG_LEVEL", "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"fecha inválida: {value!r} (use AAAA-MM-DD)"
        ) from None


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pharmastock",
        description="Control de vencimientos: lee lote y vencimiento desde fotos del envase",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Ruta del archivo de configuración (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Mostrar logs de depuración"
    )

    sub = parser.add_subparsers(dest="command")

    # cameras
    sub.add_parser("cameras", help="Listar cámaras disponibles")

    # scan
    scan_parser = sub.add_parser("scan", help="Fotografiar el envase y leer lote/vencimiento")
    scan_parser.add_argument(
        "--image", type=str, nargs="+", help="Usar archivos de imagen existentes"
    )
    scan_parser.add_argument(
        "--count", type=int, default=None, help="Cantidad de fotos a tomar"
    )
    scan_parser.add_argument(
        "--alert-months", type=int, default=None,
        help="Meses de anticipación para la alerta de vencimiento",
    )
    scan_parser.add_argument("--json", action="store_true", help="Salida en formato JSON")

    # extract
    extract_parser = sub.add_parser(
        "extract", help="Extraer lote/vencimiento de texto ya reconocido"
    )
    extract_parser.add_argument(
        "file", nargs="?", default="-", help="Archivo de texto (por defecto stdin)"
    )
    extract_parser.add_argument("--json", action="store_true", help="Salida en formato JSON")

    # status
    status_parser = sub.add_parser("status", help="Clasificar una fecha de vencimiento")
    status_parser.add_argument("date", type=_parse_date, help="Fecha (AAAA-MM-DD)")
    status_parser.add_argument("--alert-months", type=int, default=None)
    status_parser.add_argument(
        "--today", type=_parse_date, default=None, help="Fecha de referencia"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error de configuración: {e}", file=sys.stderr)
        sys.exit(1)

    match args.command:
        case "cameras":
            _cmd_cameras()
        case "scan":
            if not asyncio.run(_cmd_scan(config, args)):
                sys.exit(1)
        case "extract":
            _cmd_extract(args)
        case "status":
            _cmd_status(config, args)


def _cmd_cameras() -> None:
    try:
        cameras = PackageCamera.list_cameras()
    except (RuntimeError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if not cameras:
        print("No se encontraron cámaras disponibles.")
        return
    print(f"Cámaras disponibles: {len(cameras)}")
    for idx in cameras:
        print(f"  Cámara {idx}")


def _read_images(paths: list[str], max_images: int) -> list[bytes]:
    if len(paths) > max_images:
        logger.warning(
            "Only the first %d of %d images are used", max_images, len(paths)
        )
        paths = paths[:max_images]
    return [Path(p).read_bytes() for p in paths]


def _resolve_alert_months(config, args) -> int:
    if args.alert_months is None:
        return config.alerts.months
    return check_alert_months(args.alert_months, "--alert-months")


def _capture_images(config, count: int) -> list[bytes]:
    camera = PackageCamera(
        camera_index=config.camera.index,
        save_dir=config.camera.save_dir,
    )

    def prompt(shot: int) -> None:
        input(f"📷 Foto {shot}/{count}: coloque el envase y presione Enter...")

    captures = camera.capture_series(count, before_each=prompt)
    print(f"   {len(captures)} foto(s) tomada(s)")
    return [Path(c.image_path).read_bytes() for c in captures]


async def _cmd_scan(config, args) -> bool:
    max_images = config.scan.max_images

    try:
        alert_months = _resolve_alert_months(config, args)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return False

    if args.image:
        try:
            images = _read_images(args.image, max_images)
        except OSError as e:
            print(f"No se pudo leer la imagen: {e}", file=sys.stderr)
            return False
    else:
        count = min(args.count or max_images, max_images)
        try:
            images = _capture_images(config, count)
        except (RuntimeError, ImportError, OSError) as e:
            print(f"Error de cámara: {e}", file=sys.stderr)
            return False

    try:
        detector = create_detector(config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return False

    scanner = ExpirationScanner(detector, alert_months=alert_months)
    print(f"🔍 Procesando {len(images)} imagen(es)...", file=sys.stderr)
    result = await scanner.scan(images)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return result.success

    if not result.success:
        print(result.error, file=sys.stderr)
        return False

    print(f"  Lote/código : {result.product_code or '-'}")
    if result.expiration_date is None:
        print("  Vencimiento : -")
    else:
        print(f"  Vencimiento : {result.expiration_date.isoformat()}")
    if result.expiration_status is not None:
        mark = _STATUS_MARKS[result.expiration_status]
        print(f"  Estado      : {mark} {status_label(result.expiration_status)}")
    return True


def _cmd_extract(args) -> None:
    if args.file == "-":
        text = sys.stdin.read()
    else:
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except OSError as e:
            print(f"No se pudo leer el archivo: {e}", file=sys.stderr)
            sys.exit(1)

    result = extract_fields(text)
    expiration = result.expiration_date.isoformat() if result.expiration_date else None

    if args.json:
        data = {
            "productCode": result.product_code,
            "expirationDateText": result.expiration_date_text,
            "expirationDate": expiration,
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print(f"  Lote/código : {result.product_code or '-'}")
    if expiration is None:
        print("  Vencimiento : -")
    else:
        print(f"  Vencimiento : {expiration} ({result.expiration_date_text})")


def _cmd_status(config, args) -> None:
    try:
        alert_months = _resolve_alert_months(config, args)
        status = classify(args.date, alert_months, args.today)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    print(f"{status.value}\t{status_label(status)}")
