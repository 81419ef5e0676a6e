import io
import os
from typing import Optional, Union
import numpy as np
from PIL import Image, UnidentifiedImageError
from editstudio.domain.errors import LoadError
from editstudio.domain.models import ImageAsset, SourceImage
from editstudio.kernel.image.logic import uint8_to_float32
from editstudio.kernel.system.logging import get_logger

logger = get_logger(__name__)


def _to_rgba(img: Image.Image) -> np.ndarray:
    # Palette / LA / I;16 etc. all go through Pillow's own RGBA conversion
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return uint8_to_float32(np.ascontiguousarray(np.asarray(img)))


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise LoadError(f"Cannot read {path}: {e}") from e


def decode_image(data: bytes, mime_type: Optional[str] = None) -> SourceImage:
    """
    Decodes encoded bytes into a SourceImage.
    The mime type is taken from the decoder when the caller does not know it.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            detected = Image.MIME.get(img.format or "")
            pixels = _to_rgba(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.error(f"Failed to decode image: {e}")
        raise LoadError(f"Cannot decode image: {e}") from e

    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise LoadError("Image has zero size")

    return SourceImage(
        pixels=pixels, mime_type=mime_type or detected or "application/octet-stream"
    )


def load_image_file(path: str) -> SourceImage:
    return decode_image(_read_bytes(path))


def read_asset(path: str) -> ImageAsset:
    """
    Wraps a file on disk as an ImageAsset, validating that it decodes.
    """
    data = _read_bytes(path)
    src = decode_image(data)
    return ImageAsset(data=data, mime_type=src.mime_type, name=os.path.basename(path))


def as_source(image: Union[SourceImage, ImageAsset, bytes]) -> SourceImage:
    if isinstance(image, SourceImage):
        return image
    if isinstance(image, ImageAsset):
        return decode_image(image.data, image.mime_type)
    if isinstance(image, (bytes, bytearray)):
        return decode_image(bytes(image))
    raise LoadError(f"Unsupported image input: {type(image).__name__}")
