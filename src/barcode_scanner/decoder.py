"""Barcode and QR recognition on top of OpenCV and :mod:`pyzbar`."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import AppConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FrameDecoder:
    """Decode the first barcode visible in a BGR frame.

    OpenCV and :mod:`pyzbar` are imported when a frame is processed so that
    the module stays importable on machines without the native zbar library.
    """

    config: AppConfig

    def resize(self, frame):
        """Downscale ``frame`` so its largest side fits ``max_frame_size``."""

        import cv2  # type: ignore

        max_dim = max(frame.shape[:2])
        limit = self.config.max_frame_size
        if max_dim <= limit:
            return frame

        scale = limit / float(max_dim)
        new_size = (int(frame.shape[1] * scale), int(frame.shape[0] * scale))
        return cv2.resize(frame, new_size)

    def decode(self, frame) -> Optional[str]:
        """Return the payload of the first symbol found in ``frame``.

        Plain grayscale is tried first, then a blurred and an Otsu-thresholded
        variant for low-contrast or noisy captures.
        """

        import cv2  # type: ignore
        from pyzbar import pyzbar  # type: ignore

        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        candidates = (
            lambda: gray,
            lambda: cv2.GaussianBlur(gray, (5, 5), 0),
            lambda: cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1],
        )

        for make_candidate in candidates:
            symbols = pyzbar.decode(make_candidate())
            if symbols:
                return self._payload_text(symbols[0].data)
        return None

    def decode_file(self, path: str) -> Optional[str]:
        """Decode a still image stored at ``path``."""

        import cv2  # type: ignore

        image = cv2.imread(path)
        if image is None:
            logger.warning("Unable to read image %s", path)
            return None
        return self.decode(self.resize(image))

    @staticmethod
    def _payload_text(data: bytes | bytearray | str) -> str:
        if isinstance(data, str):
            return data
        return bytes(data).decode("utf-8", errors="replace")


__all__ = ["FrameDecoder"]
