from dataclasses import dataclass
from typing import Optional, Tuple, Union
import numpy as np
from editstudio.core.validation import parse_color, validate_float
from editstudio.domain.errors import RenderError
from editstudio.domain.models import CropConfig, ImageAsset, SourceImage, ViewTransform
from editstudio.features.transform.logic import (
    canvas_to_image_coords,
    clamp_scale,
    compute_max_scale,
    compute_min_scale,
    dim_outside,
    draw_thirds,
    render_view,
    stroke_rect,
)
from editstudio.infrastructure.encoding import buffer_to_asset
from editstudio.infrastructure.loaders.image_loader import as_source
from editstudio.kernel.system.config import DEFAULT_CROP_CONFIG
from editstudio.kernel.system.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CropJob:
    """
    Everything an export needs, detached from the live engine.
    """

    source: SourceImage
    transform: ViewTransform
    mask_size: int
    output_size: int
    background: str

    def run(self) -> ImageAsset:
        if self.output_size <= 0:
            raise RenderError(f"Invalid output size: {self.output_size}")
        ratio = self.output_size / self.mask_size
        buffer = render_view(
            self.source,
            self.transform,
            self.output_size,
            parse_color(self.background),
            ratio=ratio,
        )
        return buffer_to_asset(buffer, name="crop.png")


class TransformEngine:
    """
    Pan / zoom state for one loaded image inside a fixed square crop mask.

    All state changes replace the ViewTransform wholesale. Scale changes are
    clamped to [min_scale, max_scale]; panning is unconstrained and may move
    the image out of the mask, in which case the export shows background.
    """

    def __init__(self, config: CropConfig = DEFAULT_CROP_CONFIG):
        self.config = config
        self._source: Optional[SourceImage] = None
        self._transform = ViewTransform()
        self._min_scale = 1.0
        self._max_scale = 1.0

    @property
    def source(self) -> Optional[SourceImage]:
        return self._source

    @property
    def is_loaded(self) -> bool:
        return self._source is not None

    @property
    def transform(self) -> ViewTransform:
        return self._transform

    @property
    def min_scale(self) -> float:
        return self._min_scale

    @property
    def max_scale(self) -> float:
        return self._max_scale

    @property
    def offset(self) -> Tuple[float, float]:
        return self._transform.offset

    def initialize(self, image: Union[SourceImage, ImageAsset, bytes]) -> None:
        """
        Loads a new image and fits it to the mask.
        Decoding happens before any state is touched, so a LoadError leaves
        the engine exactly as it was.
        """
        source = as_source(image)
        min_scale, max_scale = self._scale_bounds(source)

        self._source = source
        self._min_scale, self._max_scale = min_scale, max_scale
        self._transform = ViewTransform(scale=min_scale)
        logger.info(
            f"Loaded {source.width}x{source.height} {source.mime_type}, "
            f"scale range [{min_scale:.4f}, {max_scale:.4f}]"
        )

    def unload(self) -> None:
        self._source = None
        self._transform = ViewTransform()
        self._min_scale = self._max_scale = 1.0

    def reset(self) -> None:
        if self._source is None:
            self._transform = ViewTransform()
            return
        self._min_scale, self._max_scale = self._scale_bounds(self._source)
        self._transform = ViewTransform(scale=self._min_scale)

    def set_scale(self, value: float) -> float:
        # Non-finite input keeps the current scale
        value = validate_float(value, self._transform.scale)
        scale = clamp_scale(value, self._min_scale, self._max_scale)
        self._transform = self._transform.with_scale(scale)
        return scale

    def zoom(self, factor: float) -> float:
        return self.set_scale(self._transform.scale * factor)

    @property
    def zoom_fraction(self) -> float:
        """Current scale as 0.0 (cover) - 1.0 (max zoom), for sliders."""
        span = self._max_scale - self._min_scale
        if span <= 0:
            return 0.0
        return (self._transform.scale - self._min_scale) / span

    def set_zoom_fraction(self, fraction: float) -> float:
        span = self._max_scale - self._min_scale
        return self.set_scale(self._min_scale + span * fraction)

    def pan(self, dx: float, dy: float) -> None:
        self._transform = self._transform.translated(validate_float(dx), validate_float(dy))

    def set_offset(self, x: float, y: float) -> None:
        ox, oy = self._transform.offset
        self._transform = self._transform.with_offset(validate_float(x, ox), validate_float(y, oy))

    def render_preview(self, surface: np.ndarray) -> None:
        """
        Paints the current view into a (canvas_size, canvas_size, 3) float32
        buffer. Only the surface is modified.
        """
        size = self.config.canvas_size
        if surface.shape != (size, size, 3) or surface.dtype != np.float32:
            raise RenderError(
                f"Preview surface must be float32 ({size}, {size}, 3), "
                f"got {surface.dtype} {surface.shape}"
            )

        background = parse_color(self.config.preview_background)
        if self._source is None:
            surface[...] = background
        else:
            surface[...] = render_view(
                self._source, self._transform, size, background
            )

        rect = self.config.mask.rect
        dim_outside(surface, rect, self.config.dim_alpha)
        if self.config.show_thirds:
            draw_thirds(surface, rect)
        stroke_rect(
            surface,
            rect,
            parse_color(self.config.border_color),
            self.config.border_width,
        )

    def new_surface(self) -> np.ndarray:
        size = self.config.canvas_size
        return np.zeros((size, size, 3), dtype=np.float32)

    def snapshot(self, output_size: Optional[int] = None) -> CropJob:
        if self._source is None:
            raise RenderError("No image loaded")
        return CropJob(
            source=self._source,
            transform=self._transform,
            mask_size=self.config.mask_size,
            output_size=self.config.output_size if output_size is None else output_size,
            background=self.config.export_background,
        )

    def export_crop(self, output_size: Optional[int] = None) -> ImageAsset:
        job = self.snapshot(output_size)
        logger.info(
            f"Exporting {job.output_size}px crop "
            f"(scale={job.transform.scale:.4f}, offset={job.transform.offset})"
        )
        return job.run()

    def visible_source_rect(self) -> Tuple[float, float, float, float]:
        """
        The mask expressed in source image pixels as (x1, y1, x2, y2).
        May extend past the image bounds when panned out.
        """
        if self._source is None:
            raise RenderError("No image loaded")
        x, y, w, h = self.config.mask.rect
        size = self.config.canvas_size
        x1, y1 = canvas_to_image_coords(
            (x, y), self._transform, self._source.size, size
        )
        x2, y2 = canvas_to_image_coords(
            (x + w, y + h), self._transform, self._source.size, size
        )
        return x1, y1, x2, y2

    def _scale_bounds(self, source: SourceImage) -> Tuple[float, float]:
        min_scale = compute_min_scale(
            source.width, source.height, self.config.mask_size
        )
        max_scale = compute_max_scale(
            min_scale, self.config.max_zoom, self.config.max_scale_ceiling
        )
        return min_scale, max_scale
