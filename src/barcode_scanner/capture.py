"""Qt camera capture pipeline feeding the scanner controller."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QThread, pyqtSignal

from .config import AppConfig, CameraConfig
from .decoder import FrameDecoder

logger = logging.getLogger(__name__)


class CameraWorker(QObject):  # pragma: no cover - requires Qt event loop
    """Background worker that streams frames from the system camera."""

    frame_captured = pyqtSignal(object)
    decoded = pyqtSignal(str)
    status = pyqtSignal(str)
    finished = pyqtSignal()

    def __init__(self, config: AppConfig, camera_config: CameraConfig):
        super().__init__()
        self._config = config
        self._camera_config = camera_config
        self._decoder = FrameDecoder(config)
        self._running = False
        self._cv2 = None

    def stop(self) -> None:
        self._running = False

    def run(self) -> None:
        try:
            import cv2  # type: ignore
            from pyzbar import pyzbar  # type: ignore  # noqa: F401
        except Exception:
            self.status.emit("Camera dependencies not installed")
            self.finished.emit()
            return

        self._cv2 = cv2

        capture = self._open_capture()
        if capture is None:
            self.status.emit("Unable to access camera")
            self.finished.emit()
            return

        self._running = True
        frame_skip = max(1, self._config.camera_frame_skip)
        frame_counter = 0

        self.status.emit("Camera active – point it at a barcode")

        try:
            while self._running:
                success, frame = capture.read()
                if not success or frame is None:
                    self.status.emit("Camera feed unavailable")
                    break

                frame = self._decoder.resize(frame)
                self.frame_captured.emit(frame)

                frame_counter += 1
                if frame_counter % frame_skip:
                    continue

                value = self._decoder.decode(frame)
                if value:
                    self.decoded.emit(value)
        finally:
            self._running = False
            capture.release()
            self.finished.emit()

    def _open_capture(self):
        assert self._cv2 is not None
        config = self._camera_config

        default_backend = getattr(self._cv2, "CAP_ANY", 0)
        for backend in config.get_backends() or [default_backend]:
            for index in config.get_indices():
                try:
                    capture = self._cv2.VideoCapture(index, backend)
                except TypeError:
                    capture = self._cv2.VideoCapture(index)
                if not capture or not capture.isOpened():
                    if capture:
                        capture.release()
                    continue

                capture.set(self._cv2.CAP_PROP_FRAME_WIDTH, config.width)
                capture.set(self._cv2.CAP_PROP_FRAME_HEIGHT, config.height)
                logger.info("Opened camera %s (backend %s)", index, backend)
                return capture
        return None


class QtCaptureSession(QObject):  # pragma: no cover - requires Qt event loop
    """Running capture pipeline: a :class:`CameraWorker` on its own thread."""

    frame_captured = pyqtSignal(object)
    status = pyqtSignal(str)
    finished = pyqtSignal()

    def __init__(
        self,
        config: AppConfig,
        camera_config: CameraConfig,
        on_decoded: Callable[[str], None],
    ):
        super().__init__()
        self._on_decoded_cb = on_decoded
        self._worker: Optional[CameraWorker] = CameraWorker(config, camera_config)
        self._thread: Optional[QThread] = QThread()
        self._worker.moveToThread(self._thread)

        self._thread.started.connect(self._worker.run)
        self._worker.frame_captured.connect(self.frame_captured)
        self._worker.decoded.connect(self._on_decoded)
        self._worker.status.connect(self.status)
        self._worker.finished.connect(self._on_finished)
        self._thread.finished.connect(self._thread.deleteLater)

    @property
    def is_active(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    def start(self) -> None:
        assert self._thread is not None
        self._thread.start()

    def stop(self) -> None:
        if self._worker:
            self._worker.stop()
        if self._thread and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait(1500)
        self._thread = None
        self._worker = None

    def _on_decoded(self, value: str) -> None:
        if self._worker is not None:
            self._on_decoded_cb(value)

    def _on_finished(self) -> None:
        if self._thread and self._thread.isRunning():
            self._thread.quit()
        self.finished.emit()


class QtCaptureBackend:  # pragma: no cover - requires Qt event loop
    """Capture capability starting one :class:`QtCaptureSession` per call."""

    def __init__(self, config: AppConfig, camera_config: CameraConfig):
        self._config = config
        self._camera_config = camera_config

    def start(self, on_decoded: Callable[[str], None]) -> QtCaptureSession:
        session = QtCaptureSession(self._config, self._camera_config, on_decoded)
        session.start()
        return session


__all__ = ["CameraWorker", "QtCaptureBackend", "QtCaptureSession"]
