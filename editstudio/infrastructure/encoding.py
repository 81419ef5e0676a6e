import io
import numpy as np
from PIL import Image
from editstudio.core.performance import time_function
from editstudio.domain.models import ImageAsset
from editstudio.kernel.image.logic import float_to_uint8


@time_function
def encode_png(buffer: np.ndarray) -> bytes:
    """
    Encodes an RGB float or uint8 buffer as PNG.
    No timestamps or metadata chunks are written, so equal pixels give equal bytes.
    """
    u8 = float_to_uint8(buffer) if buffer.dtype != np.uint8 else buffer
    out = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(u8[..., :3])).save(out, format="PNG")
    return out.getvalue()


def buffer_to_asset(buffer: np.ndarray, name: str = "crop.png") -> ImageAsset:
    return ImageAsset(data=encode_png(buffer), mime_type="image/png", name=name)
