import base64
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple
import numpy as np
from editstudio.core.types import Dimensions, Point, Rect


def _short_id() -> str:
    return uuid.uuid4().hex[:9]


def clean_base64(b64: str) -> str:
    """
    Strips a data URL prefix if present, generic for all image types.
    """
    if ";base64," in b64:
        return b64.split(";base64,", 1)[1]
    return b64


class AppMode(str, Enum):
    RENOVATION = "renovation"
    MARKETPLACE = "marketplace"
    MERCHANT_COIN = "merchant_coin"
    HEADSHOT = "headshot"
    GENERAL = "general"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]

    @property
    def target_app(self) -> str:
        return MODE_TARGET_APPS.get(self, "My Library")


MODE_LABELS = {
    AppMode.RENOVATION: "Home Renovation",
    AppMode.MARKETPLACE: "Marketplace Studio",
    AppMode.MERCHANT_COIN: "Merchant Coin Studio",
    AppMode.HEADSHOT: "Pro Headshot Creator",
    AppMode.GENERAL: "Creative Edit",
}

MODE_TARGET_APPS = {
    AppMode.RENOVATION: "Renovision Pro",
    AppMode.MARKETPLACE: "CDI Marketplace",
    AppMode.MERCHANT_COIN: "Quantum Wallet",
}


@dataclass(frozen=True)
class ImageAsset:
    """
    An encoded image travelling between the cropper, the history and the
    edit service. Never decoded in place.
    """

    data: bytes
    mime_type: str = "image/png"
    name: str = "image"
    id: str = field(default_factory=_short_id)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, url: str, name: str = "image") -> "ImageAsset":
        mime_type = "image/png"
        if url.startswith("data:") and ";base64," in url:
            mime_type = url[5:].split(";base64,", 1)[0] or mime_type
        return cls(
            data=base64.b64decode(clean_base64(url)), mime_type=mime_type, name=name
        )


@dataclass(frozen=True, eq=False)
class SourceImage:
    """
    Decoded raster owned by a single transform engine.
    Pixels are straight (non-premultiplied) RGBA float32 in 0.0 - 1.0.
    """

    pixels: np.ndarray
    mime_type: str = "image/png"

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Dimensions:
        return self.width, self.height


@dataclass(frozen=True)
class ViewTransform:
    """
    Maps the image center onto the crop mask center.
    Replaced wholesale on every change, never mutated.
    """

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def offset(self) -> Point:
        return self.offset_x, self.offset_y

    def with_scale(self, scale: float) -> "ViewTransform":
        return replace(self, scale=scale)

    def with_offset(self, x: float, y: float) -> "ViewTransform":
        return replace(self, offset_x=x, offset_y=y)

    def translated(self, dx: float, dy: float) -> "ViewTransform":
        return replace(self, offset_x=self.offset_x + dx, offset_y=self.offset_y + dy)


@dataclass(frozen=True)
class CropMask:
    """
    Square crop boundary centered in a square display canvas.
    """

    size: int
    canvas_size: int

    @property
    def center(self) -> Point:
        return self.canvas_size / 2.0, self.canvas_size / 2.0

    @property
    def rect(self) -> Rect:
        origin = (self.canvas_size - self.size) // 2
        return origin, origin, self.size, self.size


@dataclass(frozen=True)
class OutputSpec:
    output_size: int
    mask_size: int

    @property
    def ratio(self) -> float:
        return self.output_size / self.mask_size


@dataclass(frozen=True)
class CropConfig:
    """
    Geometry and colours of the crop widget and its export.
    """

    canvas_size: int = 500
    mask_size: int = 300
    output_size: int = 1024
    # Zoom ceiling as a multiple of the cover scale
    max_zoom: float = 4.0
    # Optional absolute cap on the scale, never below the cover scale
    max_scale_ceiling: Optional[float] = None
    export_background: str = "#ffffff"
    preview_background: str = "#0f172a"
    dim_alpha: float = 0.7
    border_color: str = "#f97316"
    border_width: int = 2
    show_thirds: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.mask_size <= self.canvas_size:
            raise ValueError(
                f"mask_size must be in (0, canvas_size], got {self.mask_size} "
                f"for canvas {self.canvas_size}"
            )
        if self.output_size <= 0:
            raise ValueError(f"output_size must be positive, got {self.output_size}")
        if not self.max_zoom >= 1.0:
            raise ValueError(f"max_zoom must be at least 1, got {self.max_zoom}")
        if not 0.0 <= self.dim_alpha <= 1.0:
            raise ValueError(f"dim_alpha must be within [0, 1], got {self.dim_alpha}")

    @property
    def mask(self) -> CropMask:
        return CropMask(size=self.mask_size, canvas_size=self.canvas_size)

    def output(self, output_size: Optional[int] = None) -> OutputSpec:
        return OutputSpec(
            output_size=self.output_size if output_size is None else output_size,
            mask_size=self.mask_size,
        )


@dataclass(frozen=True)
class GenerationResult:
    image: ImageAsset
    prompt: str = ""
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class HistoryEntry:
    """
    One accepted edit. originating_input is None only for edits created
    without a base image.
    """

    result: GenerationResult
    originating_input: Optional[ImageAsset] = None


@dataclass(frozen=True)
class EditRequest:
    prompt: str
    model_id: str
    base_image: Optional[ImageAsset] = None
    reference_images: Tuple[ImageAsset, ...] = ()
    credential: Optional[str] = None


@dataclass(frozen=True)
class SavedImage:
    result: GenerationResult
    mode: AppMode
    original_image: Optional[ImageAsset] = None
    id: str = field(default_factory=_short_id)
