import math
from typing import Any, cast
import numpy as np
from PIL import ImageColor
from editstudio.core.types import ImageBuffer, RGB


def ensure_image(arr: Any) -> ImageBuffer:
    """
    Ensures the input is a float32 numpy array and returns it as an ImageBuffer.
    This is preferred over a raw cast because it performs runtime validation.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.dtype != np.float32:
        arr = arr.astype(np.float32)

    return cast(ImageBuffer, arr)


def validate_float(val: Any, default: float = 0.0) -> float:
    """Ensures a value is a finite float, providing a default otherwise."""
    if val is None:
        return default
    try:
        res = float(val)
    except (TypeError, ValueError):
        return default
    return res if math.isfinite(res) else default


def parse_color(value: str) -> RGB:
    """
    Converts a CSS colour string ("#f97316", "white", ...) to normalized RGB.
    """
    r, g, b = ImageColor.getrgb(value)[:3]
    return r / 255.0, g / 255.0, b / 255.0
