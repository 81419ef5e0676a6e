import numpy as np
from editstudio.core.types import ImageBuffer


def uint8_to_float32(arr: np.ndarray) -> ImageBuffer:
    return (arr.astype(np.float32) / 255.0).astype(np.float32)


def float_to_uint8(buffer: np.ndarray) -> np.ndarray:
    """
    Quantizes a 0.0 - 1.0 float buffer with round-half-up, so repeated
    encodes of the same buffer are bit-identical.
    """
    return (np.clip(buffer, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
