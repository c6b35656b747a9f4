"""Scanner controller owning the capture session and the permission flow."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from .config import AppConfig
from .permissions import PermissionProvider
from .state import PermissionStatus, ScannerState, ScanState

logger = logging.getLogger(__name__)


class CaptureSession(Protocol):
    """Handle of a running capture pipeline, renderable as a live preview."""

    @property
    def is_active(self) -> bool:
        ...

    def stop(self) -> None:
        ...


class CaptureBackend(Protocol):
    """Platform capability that streams frames and recognises barcodes."""

    def start(self, on_decoded: Callable[[str], None]) -> CaptureSession:
        ...


class BarcodeScanner:
    """Start and stop scanning and publish what the camera recognises.

    State changes are published through callbacks registered with
    :meth:`on_detect`, :meth:`on_session_changed` and :meth:`on_access_denied`.
    The controller is the only writer of :attr:`state`.

    Args:
        backend: Capture capability used to start sessions.
        permission: Provider of the camera permission.
        config: Application configuration, for the denial message.
    """

    def __init__(
        self,
        backend: CaptureBackend,
        permission: PermissionProvider,
        config: AppConfig | None = None,
    ) -> None:
        self._backend = backend
        self._permission = permission
        self._config = config or AppConfig()
        self._state = ScannerState(
            camera_access_denied_message=self._config.access_denied_message
        )

        self._on_detect_cb: Optional[Callable[[Optional[str]], None]] = None
        self._on_session_cb: Optional[Callable[[Optional[CaptureSession]], None]] = None
        self._on_denied_cb: Optional[Callable[[str], None]] = None

    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def capture_session(self) -> Optional[CaptureSession]:
        return self._state.capture_session

    @property
    def detected_barcode(self) -> Optional[str]:
        return self._state.detected_barcode

    @property
    def show_access_denied_alert(self) -> bool:
        return self._state.show_access_denied_alert

    @property
    def camera_access_denied_message(self) -> str:
        return self._state.camera_access_denied_message

    @property
    def is_scanning(self) -> bool:
        """``True`` while capture runs or a permission request is in flight."""

        return self._state.scan_state in (ScanState.SCANNING, ScanState.REQUESTING_PERMISSION)

    def on_detect(self, callback: Optional[Callable[[Optional[str]], None]]) -> None:
        """Register ``callback`` for every change of the detected value."""

        self._on_detect_cb = callback

    def on_session_changed(
        self, callback: Optional[Callable[[Optional[CaptureSession]], None]]
    ) -> None:
        """Register ``callback`` for session start (handle) and stop (``None``)."""

        self._on_session_cb = callback

    def on_access_denied(self, callback: Optional[Callable[[str], None]]) -> None:
        """Register ``callback`` receiving the message when access is refused."""

        self._on_denied_cb = callback

    def start_scanning(self) -> None:
        if self._state.scan_state in (ScanState.SCANNING, ScanState.REQUESTING_PERMISSION):
            return

        status = self._permission.status()
        if status is PermissionStatus.NOT_DETERMINED:
            self._state.scan_state = ScanState.REQUESTING_PERMISSION
            logger.debug("Requesting camera permission")
            try:
                self._permission.request(self._on_permission_result)
            except Exception:
                if self._state.scan_state is ScanState.REQUESTING_PERMISSION:
                    self._state.scan_state = ScanState.IDLE
                raise
        elif status is PermissionStatus.GRANTED:
            self._begin_capture()
        else:
            self._deny()

    def stop_scanning(self) -> None:
        if self._state.scan_state is ScanState.REQUESTING_PERMISSION:
            self._state.scan_state = ScanState.IDLE

        session = self._state.capture_session
        if session is None:
            return

        session.stop()
        self._state.capture_session = None
        self._state.scan_state = ScanState.IDLE
        logger.info("Scanning stopped")
        self._emit(self._on_session_cb, None)

    def toggle_scanning(self) -> bool:
        """Pause when scanning, start otherwise; return the new scanning flag."""

        if self.is_scanning:
            self.stop_scanning()
        else:
            self.start_scanning()
        return self.is_scanning

    def reset(self) -> None:
        """Forget the detected value and restart with a fresh session."""

        self._state.detected_barcode = None
        self._emit(self._on_detect_cb, None)
        self.stop_scanning()
        self.start_scanning()

    def dismiss_access_denied_alert(self) -> None:
        self._state.show_access_denied_alert = False

    def _on_permission_result(self, granted: bool) -> None:
        if self._state.scan_state is not ScanState.REQUESTING_PERMISSION:
            # stop_scanning() ran while the request was pending
            logger.info("Ignoring camera permission result after stop")
            return

        if granted:
            self._begin_capture()
        else:
            self._deny()

    def _begin_capture(self) -> None:
        session = self._backend.start(self._on_decoded)
        self._state.capture_session = session
        self._state.scan_state = ScanState.SCANNING
        self._state.show_access_denied_alert = False
        logger.info("Scanning started")
        self._emit(self._on_session_cb, session)

    def _deny(self) -> None:
        self._state.scan_state = ScanState.DENIED
        self._state.show_access_denied_alert = True
        logger.warning("Camera access denied")
        self._emit(self._on_denied_cb, self._state.camera_access_denied_message)

    def _on_decoded(self, value: str) -> None:
        if not value:
            return
        self._state.detected_barcode = value
        logger.debug("Detected %r", value)
        self._emit(self._on_detect_cb, value)

    def _emit(self, callback, value) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("Failed to run scanner callback")


__all__ = ["BarcodeScanner", "CaptureBackend", "CaptureSession"]
