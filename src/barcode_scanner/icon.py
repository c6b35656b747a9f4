"""Application icon helpers."""
from __future__ import annotations

# Relative widths of the bars drawn on the icon, alternating bar/gap.
_BAR_PATTERN = (2, 1, 1, 1, 3, 1, 1, 2, 2, 1, 1, 1, 3)


def create_icon(size: int = 64):  # pragma: no cover - requires PyQt at runtime
    """Create a :class:`~PyQt5.QtGui.QIcon` showing a stylised barcode.

    The import is performed lazily so that automated tests do not require a
    graphical backend.
    """

    try:
        from PyQt5.QtGui import QBrush, QColor, QIcon, QPainter, QPixmap
        from PyQt5.QtCore import Qt
    except Exception as exc:  # pragma: no cover - depends on environment
        raise RuntimeError("PyQt5 is required to generate the application icon") from exc

    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing)
    painter.setBrush(QBrush(QColor("#88C0D0")))
    painter.setPen(Qt.NoPen)
    painter.drawRoundedRect(2, 2, size - 4, size - 4, size // 6, size // 6)

    margin = size // 6
    unit = (size - 2 * margin) / float(sum(_BAR_PATTERN))
    painter.setBrush(QBrush(QColor("#2E3440")))
    x = float(margin)
    for position, width in enumerate(_BAR_PATTERN):
        if position % 2 == 0:
            painter.drawRect(int(x), margin, max(1, int(width * unit)), size - 2 * margin)
        x += width * unit
    painter.end()

    return QIcon(pixmap)


__all__ = ["create_icon"]
