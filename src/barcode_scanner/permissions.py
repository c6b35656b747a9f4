"""Camera permission handling and the system settings deep link."""
from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, Protocol

from .config import CameraConfig
from .state import PermissionStatus

logger = logging.getLogger(__name__)

_SETTINGS_URLS = {
    "darwin": "x-apple.systempreferences:com.apple.preference.security?Privacy_Camera",
    "win32": "ms-settings:privacy-webcam",
}


class PermissionProvider(Protocol):
    """Platform capability that owns the camera permission."""

    def status(self) -> PermissionStatus:
        ...

    def request(self, completion: Callable[[bool], None]) -> None:
        ...


class CameraProbePermission:
    """Desktop permission capability backed by opening the camera.

    Desktop operating systems show their consent prompt, if any, the first time
    a process opens the camera.  Opening and releasing the device is therefore
    both the request and the check.  A denied status is probed again on every
    :meth:`status` call so that a grant made in system settings is noticed.
    """

    def __init__(self, camera_config: CameraConfig | None = None) -> None:
        self._camera_config = camera_config or CameraConfig()
        self._status = PermissionStatus.NOT_DETERMINED

    def status(self) -> PermissionStatus:
        if self._status is PermissionStatus.DENIED and self._probe():
            logger.info("Camera access granted outside the application")
            self._status = PermissionStatus.GRANTED
        return self._status

    def request(self, completion: Callable[[bool], None]) -> None:
        granted = self._probe()
        self._status = PermissionStatus.GRANTED if granted else PermissionStatus.DENIED
        logger.info("Camera permission %s", self._status.value)
        completion(granted)

    def _probe(self) -> bool:
        try:
            import cv2  # type: ignore
        except Exception:
            logger.warning("OpenCV is not installed; camera access unavailable")
            return False

        # each absent device blocks until the backend times out
        for index in self._camera_config.get_indices()[:1]:
            capture = cv2.VideoCapture(index)
            try:
                if capture is not None and capture.isOpened():
                    return True
            finally:
                if capture is not None:
                    capture.release()
        return False


def settings_url(platform: str | None = None) -> Optional[str]:
    """Return the camera privacy settings URL for ``platform``."""

    platform = platform or sys.platform
    for prefix, url in _SETTINGS_URLS.items():
        if platform.startswith(prefix):
            return url
    return None


def open_system_settings(platform: str | None = None) -> bool:  # pragma: no cover - requires Qt at runtime
    """Open the camera privacy settings page of the host system."""

    url = settings_url(platform)
    if url is None:
        logger.warning("No camera settings page known for %s", platform or sys.platform)
        return False

    try:
        from PyQt5.QtCore import QUrl
        from PyQt5.QtGui import QDesktopServices
    except Exception as exc:  # pragma: no cover - depends on environment
        raise RuntimeError("PyQt5 is required to open system settings") from exc

    if not QDesktopServices.openUrl(QUrl(url)):
        logger.warning("Failed to open %s", url)
        return False
    return True


__all__ = [
    "CameraProbePermission",
    "PermissionProvider",
    "open_system_settings",
    "settings_url",
]
