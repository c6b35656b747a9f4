"""Configuration data structures for the Barcode Scanner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class AppConfig:
    """Static configuration options used across the application."""

    app_name: str = "BarcodeScanner"
    app_version: str = "1.0"
    window_title: str = "Barcode Scanner"
    camera_frame_skip: int = 5
    max_frame_size: int = 1_920
    preview_aspect_ratio: float = 3 / 4
    preview_placeholder: str = "Camera preview will appear here"
    access_denied_title: str = "Camera Access Required"
    access_denied_message: str = (
        "Camera access is turned off for this application. "
        "Enable it in your system privacy settings to scan barcodes."
    )
    log_level: str = "INFO"


@dataclass(slots=True)
class CameraConfig:
    """Runtime camera configuration used by the capture worker."""

    width: int = 640
    height: int = 480
    index: Optional[int] = None
    fallback_indices: List[int] = field(default_factory=lambda: [0, 1, 2])

    def get_backends(self) -> List[int]:
        """Return a list of OpenCV backend identifiers to try.

        OpenCV is imported lazily so that the configuration can be read in
        environments without a camera stack.
        """

        try:  # pragma: no cover - imported for type side effect only
            import cv2  # type: ignore
        except Exception:  # pragma: no cover - we simply fall back to an empty list
            return []

        try:
            return [cv2.CAP_DSHOW, cv2.CAP_MSMF, cv2.CAP_ANY]
        except AttributeError:  # pragma: no cover - depends on the OpenCV build
            return [0]

    def get_indices(self) -> List[int]:
        """Return candidate camera indices, honouring an explicit ``index``."""

        if self.index is not None:
            return [self.index]
        return list(self.fallback_indices)


@dataclass(slots=True)
class StyleConfig:
    """Simple grouping of UI styling constants."""

    bg_primary: str = "#2E3440"
    bg_secondary: str = "#3B4252"
    fg_primary: str = "#D8DEE9"
    fg_secondary: str = "#ECEFF4"
    fg_muted: str = "#81A1C1"
    accent_primary: str = "#88C0D0"
    accent_secondary: str = "#5E81AC"
    destructive: str = "#BF616A"
    result: str = "#5E9FE0"
    border: str = "#4C566A"
    font_family: str = "Segoe UI, sans-serif"
    font_size: int = 14


__all__ = ["AppConfig", "CameraConfig", "StyleConfig"]
