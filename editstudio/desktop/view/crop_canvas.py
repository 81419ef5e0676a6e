from typing import Optional
import numpy as np
from PyQt6.QtWidgets import QWidget
from PyQt6.QtGui import QPainter, QColor, QMouseEvent, QWheelEvent
from PyQt6.QtCore import Qt, QEvent, QRectF, pyqtSignal
from editstudio.desktop.converters import ImageConverter
from editstudio.features.pointer.controller import (
    PointerController,
    PointerEvent,
    PointerKind,
    SurfaceGeometry,
)
from editstudio.features.transform.engine import TransformEngine

_TOUCH_KINDS = {
    QEvent.Type.TouchBegin: PointerKind.TOUCH_START,
    QEvent.Type.TouchUpdate: PointerKind.TOUCH_MOVE,
    QEvent.Type.TouchEnd: PointerKind.TOUCH_END,
    QEvent.Type.TouchCancel: PointerKind.TOUCH_CANCEL,
}


class CropCanvas(QWidget):
    """
    Shows the engine preview scaled to fit the widget and drags the image
    with mouse or touch. The preview buffer keeps its own backing size, so
    widget coordinates are remapped before they reach the engine.
    """

    view_changed = pyqtSignal()

    def __init__(self, engine: TransformEngine, parent=None):
        super().__init__(parent)
        self.engine = engine
        self._surface: np.ndarray = engine.new_surface()
        self._display_rect = QRectF()
        self.controller = PointerController(engine, self._geometry())

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents)
        self.setMinimumSize(200, 200)
        self.setCursor(Qt.CursorShape.SizeAllCursor)
        self.refresh()

    def refresh(self) -> None:
        """Re-renders the preview; call once per engine mutation."""
        self.engine.render_preview(self._surface)
        self.update()

    def _geometry(self) -> SurfaceGeometry:
        size = self.engine.config.canvas_size
        r = self._display_rect
        return SurfaceGeometry(
            backing_width=size,
            backing_height=size,
            displayed_width=r.width(),
            displayed_height=r.height(),
            left=r.x(),
            top=r.y(),
        )

    def _layout(self) -> None:
        side = min(self.width(), self.height())
        x = (self.width() - side) / 2.0
        y = (self.height() - side) / 2.0
        self._display_rect = QRectF(x, y, side, side)
        self.controller.set_geometry(self._geometry())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._layout()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(2, 6, 23))
        painter.drawImage(self._display_rect, ImageConverter.to_qimage(self._surface))

    def _dispatch(self, kind: PointerKind, x: float, y: float) -> bool:
        response = self.controller.handle(PointerEvent(kind, x, y))
        if response.changed:
            self.view_changed.emit()
            self.refresh()
        return response.prevent_default

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self._dispatch(PointerKind.DOWN, pos.x(), pos.y())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        self._dispatch(PointerKind.MOVE, pos.x(), pos.y())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        self._dispatch(PointerKind.UP, pos.x(), pos.y())

    def leaveEvent(self, event) -> None:
        self._dispatch(PointerKind.LEAVE, 0.0, 0.0)
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        steps = event.angleDelta().y() / 120.0
        if steps:
            self.engine.zoom(1.1**steps)
            self.view_changed.emit()
            self.refresh()

    def event(self, event: QEvent) -> bool:
        kind: Optional[PointerKind] = _TOUCH_KINDS.get(event.type())
        if kind is None:
            return super().event(event)

        points = event.points()
        pos = points[0].position() if points else None
        prevent = self._dispatch(
            kind, pos.x() if pos else 0.0, pos.y() if pos else 0.0
        )
        # TouchBegin must be accepted to receive the rest of the sequence
        if prevent or kind == PointerKind.TOUCH_START:
            event.accept()
            return True
        event.ignore()
        return False
