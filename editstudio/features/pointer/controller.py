from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional
from editstudio.core.types import Point
from editstudio.features.transform.engine import TransformEngine


class PointerKind(Enum):
    DOWN = auto()
    MOVE = auto()
    UP = auto()
    LEAVE = auto()
    TOUCH_START = auto()
    TOUCH_MOVE = auto()
    TOUCH_END = auto()
    TOUCH_CANCEL = auto()


_STARTS = {PointerKind.DOWN, PointerKind.TOUCH_START}
_MOVES = {PointerKind.MOVE, PointerKind.TOUCH_MOVE}
_ENDS = {
    PointerKind.UP,
    PointerKind.LEAVE,
    PointerKind.TOUCH_END,
    PointerKind.TOUCH_CANCEL,
}


@dataclass(frozen=True)
class SurfaceGeometry:
    """
    Where the surface sits on screen and how large its backing buffer is.
    Displayed size and backing size differ under CSS/DPI scaling.
    """

    backing_width: float
    backing_height: float
    displayed_width: float
    displayed_height: float
    left: float = 0.0
    top: float = 0.0

    @property
    def ratio_x(self) -> float:
        if self.displayed_width <= 0:
            return 1.0
        return self.backing_width / self.displayed_width

    @property
    def ratio_y(self) -> float:
        if self.displayed_height <= 0:
            return 1.0
        return self.backing_height / self.displayed_height

    def to_canvas(self, client_x: float, client_y: float) -> Point:
        return (
            (client_x - self.left) * self.ratio_x,
            (client_y - self.top) * self.ratio_y,
        )


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerKind
    client_x: float = 0.0
    client_y: float = 0.0

    @property
    def is_touch(self) -> bool:
        return self.kind in (
            PointerKind.TOUCH_START,
            PointerKind.TOUCH_MOVE,
            PointerKind.TOUCH_END,
            PointerKind.TOUCH_CANCEL,
        )


@dataclass(frozen=True)
class PointerResponse:
    changed: bool = False
    prevent_default: bool = False


class PointerController:
    """
    Turns mouse and touch input into one drag session that moves the
    engine's offset. Only client coordinates reach this class.
    """

    def __init__(self, engine: TransformEngine, geometry: SurfaceGeometry):
        self.engine = engine
        self.geometry = geometry
        self._anchor: Optional[Point] = None

    @property
    def dragging(self) -> bool:
        return self._anchor is not None

    def set_geometry(self, geometry: SurfaceGeometry) -> None:
        self.geometry = geometry

    def cancel(self) -> None:
        self._anchor = None

    def handle(self, event: PointerEvent) -> PointerResponse:
        if event.kind in _STARTS:
            cx, cy = self.geometry.to_canvas(event.client_x, event.client_y)
            ox, oy = self.engine.offset
            self._anchor = (cx - ox, cy - oy)
            return PointerResponse()

        if event.kind in _MOVES:
            if self._anchor is None:
                return PointerResponse()
            cx, cy = self.geometry.to_canvas(event.client_x, event.client_y)
            self.engine.set_offset(cx - self._anchor[0], cy - self._anchor[1])
            return PointerResponse(changed=True, prevent_default=event.is_touch)

        if event.kind in _ENDS:
            self._anchor = None
        return PointerResponse()
