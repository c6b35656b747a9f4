"""Runtime state containers published by the scanner controller."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PermissionStatus(Enum):
    """Camera permission as reported by the platform."""

    NOT_DETERMINED = "not_determined"
    GRANTED = "granted"
    DENIED = "denied"


class ScanState(Enum):
    """Lifecycle of the capture pipeline."""

    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    SCANNING = "scanning"
    DENIED = "denied"


@dataclass(slots=True)
class ScannerState:
    """Mutable state written by the controller and read by the view."""

    capture_session: Optional[Any] = None
    detected_barcode: Optional[str] = None
    show_access_denied_alert: bool = False
    camera_access_denied_message: str = ""
    scan_state: ScanState = ScanState.IDLE


__all__ = ["PermissionStatus", "ScanState", "ScannerState"]
