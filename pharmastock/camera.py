"""USB camera capture of package photos using OpenCV."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable


@dataclass
class PackageCapture:
    camera_index: int
    image_path: str
    captured_at: str  # ISO8601


def _import_cv2():
    try:
        import cv2
    except ImportError:
        raise ImportError(
            "opencv-python is required: pip install 'pharmastock[camera]'"
        ) from None
    return cv2


class PackageCamera:
    """Capture one or more photos of a package from a USB camera."""

    def __init__(self, camera_index: int = 0, save_dir: str = "/tmp/pharmastock") -> None:
        self._camera_index = camera_index
        self._save_dir = Path(save_dir)
        self._save_dir.mkdir(parents=True, exist_ok=True)

    def capture_series(
        self,
        count: int,
        before_each: Callable[[int], None] | None = None,
    ) -> list[PackageCapture]:
        """Capture ``count`` photos, calling ``before_each(n)`` before shot n.

        ``before_each`` gives the operator a chance to turn the package so
        that the lot code and the expiration date both get photographed.
        """
        results: list[PackageCapture] = []
        for shot in range(1, count + 1):
            if before_each is not None:
                before_each(shot)
            results.append(self.capture(suffix=f"_{shot}"))
        return results

    def capture(self, suffix: str = "") -> PackageCapture:
        """Capture a single frame and save it as JPEG."""
        cv2 = _import_cv2()

        cap = cv2.VideoCapture(self._camera_index)
        if not cap.isOpened():
            raise RuntimeError(
                f"No se pudo abrir la cámara {self._camera_index}. "
                f"Verifique la conexión."
            )

        try:
            ret, frame = cap.read()
            if not ret or frame is None:
                raise RuntimeError(
                    f"No se pudo obtener una imagen de la cámara {self._camera_index}."
                )

            now = datetime.now(timezone.utc)
            timestamp = now.strftime("%Y%m%d_%H%M%S")
            filename = f"cam{self._camera_index}_{timestamp}{suffix}.jpg"
            filepath = self._save_dir / filename

            cv2.imwrite(str(filepath), frame)

            return PackageCapture(
                camera_index=self._camera_index,
                image_path=str(filepath),
                captured_at=now.isoformat(),
            )
        finally:
            cap.release()

    @staticmethod
    def list_cameras(max_check: int = 10) -> list[int]:
        """List available USB camera indices by probing."""
        cv2 = _import_cv2()

        available: list[int] = []
        for i in range(max_check):
            cap = cv2.VideoCapture(i)
            if cap.isOpened():
                available.append(i)
                cap.release()
        return available
