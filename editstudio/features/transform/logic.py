import numpy as np
import cv2
from typing import Optional, Tuple
from editstudio.core.types import ImageBuffer, Point, Rect, RGB
from editstudio.core.validation import ensure_image
from editstudio.core.performance import time_function
from editstudio.domain.errors import RenderError
from editstudio.domain.models import SourceImage, ViewTransform

# Border pixels are clamped by cv2 to 16-bit coordinates
MAX_SURFACE_SIZE = 32767


def compute_min_scale(width: int, height: int, mask_size: int) -> float:
    """
    Smallest scale at which the image still covers the whole mask.
    """
    return max(mask_size / width, mask_size / height)


def compute_max_scale(
    min_scale: float, max_zoom: float, ceiling: Optional[float] = None
) -> float:
    max_scale = min_scale * max(1.0, max_zoom)
    if ceiling is not None:
        max_scale = min(max_scale, ceiling)
    return max(min_scale, max_scale)


def clamp_scale(value: float, min_scale: float, max_scale: float) -> float:
    return float(min(max(value, min_scale), max_scale))


def view_matrix(
    transform: ViewTransform,
    image_size: Tuple[int, int],
    surface_size: int,
    ratio: float = 1.0,
) -> np.ndarray:
    """
    Builds the 2x3 forward matrix for
    translate(center) -> translate(offset * ratio) -> scale(scale * ratio)
    with the image drawn centered at the origin.

    Canvas-style math treats pixel i as the span [i, i+1]; cv2 samples at
    pixel centers, hence the half-pixel correction on the translation.
    """
    w, h = image_size
    s = transform.scale * ratio
    center = surface_size / 2.0
    tx = center + transform.offset_x * ratio - s * w / 2.0
    ty = center + transform.offset_y * ratio - s * h / 2.0
    return np.array(
        [
            [s, 0.0, tx + 0.5 * s - 0.5],
            [0.0, s, ty + 0.5 * s - 0.5],
        ],
        dtype=np.float64,
    )


def flatten_alpha(pixels: np.ndarray, background: RGB) -> ImageBuffer:
    """
    Composites straight RGBA over a solid background.
    """
    rgb = pixels[..., :3]
    alpha = pixels[..., 3:4]
    bg = np.asarray(background, dtype=np.float32)
    return ensure_image(rgb * alpha + bg * (1.0 - alpha))


@time_function
def render_view(
    source: SourceImage,
    transform: ViewTransform,
    surface_size: int,
    background: RGB,
    ratio: float = 1.0,
) -> ImageBuffer:
    """
    Draws the image onto a square surface filled with the background.

    Colours are sampled bilinearly with replicated borders; coverage is
    resolved separately with nearest sampling so that no border colour
    bleeds into pixels the image fully covers.
    """
    if surface_size <= 0 or surface_size > MAX_SURFACE_SIZE:
        raise RenderError(f"Invalid surface size: {surface_size}")

    m_mat = view_matrix(transform, source.size, surface_size, ratio)
    bg = np.asarray(background, dtype=np.float32)

    try:
        flat = flatten_alpha(source.pixels, background)
        colour = cv2.warpAffine(
            flat,
            m_mat,
            (surface_size, surface_size),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_REPLICATE,
        )
        coverage = cv2.warpAffine(
            np.ones((source.height, source.width), dtype=np.float32),
            m_mat,
            (surface_size, surface_size),
            flags=cv2.INTER_NEAREST,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0.0,
        )[..., None]
    except (MemoryError, cv2.error) as e:
        raise RenderError(f"Failed to render {surface_size}px surface: {e}") from e

    return ensure_image(colour * coverage + bg * (1.0 - coverage))


def dim_outside(surface: ImageBuffer, rect: Rect, alpha: float) -> None:
    """
    Darkens everything outside rect in place, as a black overlay of given alpha.
    """
    x, y, w, h = rect
    keep = 1.0 - alpha
    surface[:y] *= keep
    surface[y + h :] *= keep
    surface[y : y + h, :x] *= keep
    surface[y : y + h, x + w :] *= keep


def stroke_rect(surface: ImageBuffer, rect: Rect, color: RGB, width: int) -> None:
    x, y, w, h = rect
    cv2.rectangle(
        surface,
        (x, y),
        (x + w - 1, y + h - 1),
        color,
        thickness=max(1, width),
        lineType=cv2.LINE_8,
    )


def draw_thirds(
    surface: ImageBuffer, rect: Rect, color: RGB = (1.0, 1.0, 1.0), opacity: float = 0.4
) -> None:
    x, y, w, h = rect
    overlay = surface.copy()
    for i in (1, 2):
        gx = x + round(w * i / 3)
        gy = y + round(h * i / 3)
        cv2.line(overlay, (gx, y), (gx, y + h - 1), color, 1, cv2.LINE_8)
        cv2.line(overlay, (x, gy), (x + w - 1, gy), color, 1, cv2.LINE_8)
    cv2.addWeighted(overlay, opacity, surface, 1.0 - opacity, 0.0, dst=surface)


def canvas_to_image_coords(
    point: Point, transform: ViewTransform, image_size: Tuple[int, int], surface_size: int
) -> Point:
    """
    Inverse of the view mapping: canvas pixel -> source image pixel.
    """
    w, h = image_size
    center = surface_size / 2.0
    px = (point[0] - center - transform.offset_x) / transform.scale + w / 2.0
    py = (point[1] - center - transform.offset_y) / transform.scale + h / 2.0
    return px, py
