"""Barcode Scanner package."""
from __future__ import annotations

from .config import AppConfig, CameraConfig, StyleConfig
from .decoder import FrameDecoder
from .permissions import CameraProbePermission, settings_url
from .scanner import BarcodeScanner
from .state import PermissionStatus, ScannerState, ScanState

__all__ = [
    "AppConfig",
    "CameraConfig",
    "StyleConfig",
    "BarcodeScanner",
    "CameraProbePermission",
    "FrameDecoder",
    "PermissionStatus",
    "ScannerState",
    "ScanState",
    "settings_url",
]

__version__ = "1.0"
