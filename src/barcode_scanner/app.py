"""PyQt5 user interface for the Barcode Scanner."""
from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QFont, QImage, QPixmap
from PyQt5.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from .capture import QtCaptureBackend, QtCaptureSession
from .config import AppConfig, CameraConfig, StyleConfig
from .icon import create_icon
from .permissions import CameraProbePermission, open_system_settings
from .scanner import BarcodeScanner

logger = logging.getLogger(__name__)


class ScannerView(QWidget):  # pragma: no cover - requires Qt event loop
    """Live preview, last scanned value and the scan controls."""

    def __init__(self, scanner: BarcodeScanner, config: AppConfig, style: StyleConfig):
        super().__init__()
        self._scanner = scanner
        self._config = config
        self._style = style
        self._session: Optional[QtCaptureSession] = None
        self._cv2_module = None

        self._setup_ui()

        scanner.on_detect(self._on_detected)
        scanner.on_session_changed(self._on_session_changed)
        scanner.on_access_denied(self._on_access_denied)

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(20)

        preview_height = 480
        self._preview = QLabel(self._config.preview_placeholder)
        self._preview.setObjectName("PreviewLabel")
        self._preview.setAlignment(Qt.AlignCenter)
        self._preview.setFixedSize(
            int(preview_height * self._config.preview_aspect_ratio), preview_height
        )

        self._result_panel = QWidget()
        result_layout = QVBoxLayout(self._result_panel)
        heading = QLabel("Scanned value:")
        heading.setObjectName("HeadingLabel")
        heading.setAlignment(Qt.AlignCenter)
        self._result_label = QLabel()
        self._result_label.setObjectName("ResultLabel")
        self._result_label.setAlignment(Qt.AlignCenter)
        self._result_label.setWordWrap(True)
        self._result_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._result_label.setFont(QFont(self._style.font_family, 18))
        result_layout.addWidget(heading)
        result_layout.addWidget(self._result_label)
        self._result_panel.setVisible(False)

        self._status = QLabel("Camera idle")
        self._status.setAlignment(Qt.AlignCenter)
        self._status.setObjectName("SubtleLabel")

        button_row = QHBoxLayout()
        button_row.setSpacing(30)
        self._toggle_btn = QPushButton()
        self._toggle_btn.setObjectName("AccentButton")
        self._reset_btn = QPushButton("Reset")
        self._reset_btn.setObjectName("DestructiveButton")
        self._toggle_btn.clicked.connect(self._toggle_scanning)
        self._reset_btn.clicked.connect(self._reset_scanner)
        button_row.addStretch()
        button_row.addWidget(self._toggle_btn)
        button_row.addWidget(self._reset_btn)
        button_row.addStretch()

        layout.addWidget(self._preview, alignment=Qt.AlignHCenter)
        layout.addWidget(self._result_panel)
        layout.addLayout(button_row)
        layout.addWidget(self._status)
        layout.addStretch()

        self._update_toggle_label()

    def showEvent(self, event) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._run(self._scanner.start_scanning)

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._scanner.stop_scanning()
        super().hideEvent(event)

    def stop(self) -> None:
        self._scanner.stop_scanning()

    def _toggle_scanning(self) -> None:
        self._run(self._scanner.toggle_scanning)

    def _reset_scanner(self) -> None:
        self._run(self._scanner.reset)

    def _run(self, action) -> None:
        try:
            action()
        except Exception as exc:
            logger.exception("Scanner action failed")
            QMessageBox.critical(self, "Error", f"Unable to start camera: {exc}")
        self._update_toggle_label()

    def _update_toggle_label(self) -> None:
        self._toggle_btn.setText("Pause" if self._scanner.is_scanning else "Start Scan")

    def _on_detected(self, value: Optional[str]) -> None:
        self._result_label.setText(value or "")
        self._result_panel.setVisible(value is not None)

    def _on_session_changed(self, session) -> None:
        if self._session is not None:
            self._session.frame_captured.disconnect(self._on_camera_frame)
            self._session.status.disconnect(self._on_camera_status)
            self._session.finished.disconnect(self._on_camera_finished)
        self._session = session

        if session is None:
            self._preview.clear()
            self._preview.setText(self._config.preview_placeholder)
            self._status.setText("Camera stopped")
        else:
            self._status.setText("Initialising camera…")
            session.frame_captured.connect(self._on_camera_frame)
            session.status.connect(self._on_camera_status)
            session.finished.connect(self._on_camera_finished)
        self._update_toggle_label()

    def _on_camera_frame(self, frame) -> None:
        if self._session is None:
            return
        if self._cv2_module is None:
            import cv2  # type: ignore

            self._cv2_module = cv2

        rgb = self._cv2_module.cvtColor(frame, self._cv2_module.COLOR_BGR2RGB)
        height, width, channel = rgb.shape
        image = QImage(rgb.data, width, height, channel * width, QImage.Format_RGB888)
        pixmap = QPixmap.fromImage(image.copy())
        target_size = self._preview.size()
        if target_size.width() and target_size.height():
            pixmap = pixmap.scaled(target_size, Qt.KeepAspectRatioByExpanding, Qt.SmoothTransformation)
        self._preview.setPixmap(pixmap)

    def _on_camera_status(self, message: str) -> None:
        self._status.setText(message)

    def _on_camera_finished(self) -> None:
        message = self._status.text()
        self._scanner.stop_scanning()
        self._status.setText(message)

    def _on_access_denied(self, message: str) -> None:
        self._update_toggle_label()
        QTimer.singleShot(0, lambda: self._present_access_denied(message))

    def _present_access_denied(self, message: str) -> None:
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Warning)
        box.setWindowTitle(self._config.access_denied_title)
        box.setText(self._config.access_denied_title)
        box.setInformativeText(message)
        settings_btn = box.addButton("Open Settings", QMessageBox.AcceptRole)
        box.addButton("Cancel", QMessageBox.RejectRole)
        box.exec_()

        self._scanner.dismiss_access_denied_alert()
        if box.clickedButton() is settings_btn:
            open_system_settings()


class ScannerWindow(QMainWindow):  # pragma: no cover - requires Qt event loop
    def __init__(
        self,
        config: AppConfig | None = None,
        camera_config: CameraConfig | None = None,
    ) -> None:
        super().__init__()

        self._config = config or AppConfig()
        self._camera_config = camera_config or CameraConfig()
        self._style = StyleConfig()

        self._scanner = BarcodeScanner(
            QtCaptureBackend(self._config, self._camera_config),
            CameraProbePermission(self._camera_config),
            self._config,
        )

        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setWindowTitle(self._config.window_title)
        self.setMinimumSize(480, 720)

        try:
            self.setWindowIcon(create_icon())
        except RuntimeError:
            pass

        self._apply_stylesheet()

        self._view = ScannerView(self._scanner, self._config, self._style)
        self.setCentralWidget(self._view)

    def _apply_stylesheet(self) -> None:
        style = self._style
        self.setStyleSheet(
            f"""
            QMainWindow {{ background: {style.bg_primary}; }}
            QWidget {{ color: {style.fg_primary}; font-family: {style.font_family}; font-size: {style.font_size}px; }}
            QPushButton {{ background: {style.accent_secondary}; color: {style.fg_secondary}; border: none; padding: 12px 18px; border-radius: 4px; font-weight: bold; }}
            QPushButton#AccentButton {{ background: {style.accent_primary}; color: {style.bg_primary}; font-size: 18px; }}
            QPushButton#DestructiveButton {{ background: transparent; color: {style.destructive}; }}
            QPushButton:hover {{ background: {style.fg_muted}; }}
            #HeadingLabel {{ font-weight: bold; color: {style.fg_secondary}; }}
            #ResultLabel {{ color: {style.result}; }}
            #SubtleLabel {{ color: {style.fg_muted}; }}
            #PreviewLabel {{ background: {style.bg_secondary}; border: 1px solid {style.border}; border-radius: 12px; color: {style.fg_muted}; }}
            """
        )

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._view.stop()
        event.accept()


def run(config: AppConfig | None = None, camera_config: CameraConfig | None = None) -> int:  # pragma: no cover - requires Qt event loop
    config = config or AppConfig()
    app = QApplication.instance() or QApplication([])
    app.setApplicationName(config.app_name)
    app.setApplicationVersion(config.app_version)
    window = ScannerWindow(config, camera_config)
    window.show()
    return app.exec_()


__all__ = ["run", "ScannerView", "ScannerWindow"]
