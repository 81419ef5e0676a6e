import io
import numpy as np
import pytest
from PIL import Image
from editstudio.domain.models import ImageAsset


def png_bytes(arr: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(arr).save(out, format="PNG")
    return out.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    with Image.open(io.BytesIO(data)) as img:
        return np.asarray(img.convert("RGB")).copy()


def solid_rgba(width: int, height: int, color=(255, 0, 0, 255)) -> np.ndarray:
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[...] = color
    return arr


@pytest.fixture
def make_asset():
    def _make(width=64, height=48, color=(255, 0, 0, 255), name="upload.png"):
        return ImageAsset(
            data=png_bytes(solid_rgba(width, height, color)),
            mime_type="image/png",
            name=name,
        )

    return _make


@pytest.fixture
def wide_striped_png() -> bytes:
    """
    2000x1000: red left half, blue right half, green top row, yellow bottom row.
    """
    arr = solid_rgba(2000, 1000)
    arr[:, 1000:] = (0, 0, 255, 255)
    arr[0, :] = (0, 255, 0, 255)
    arr[-1, :] = (255, 255, 0, 255)
    return png_bytes(arr)
