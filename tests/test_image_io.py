import base64
import io
import numpy as np
import pytest
from PIL import Image
from conftest import decode_png, png_bytes, solid_rgba
from editstudio.domain.errors import LoadError
from editstudio.domain.models import ImageAsset, SourceImage, clean_base64
from editstudio.infrastructure.encoding import buffer_to_asset, encode_png
from editstudio.infrastructure.loaders.image_loader import (
    as_source,
    decode_image,
    load_image_file,
    read_asset,
)


def test_decode_png_to_rgba_float():
    src = decode_image(png_bytes(solid_rgba(30, 20, (255, 0, 0, 128))))
    assert src.size == (30, 20)
    assert src.pixels.dtype == np.float32
    assert src.pixels.shape == (20, 30, 4)
    assert src.mime_type == "image/png"
    assert src.pixels[0, 0, 0] == pytest.approx(1.0)
    assert src.pixels[0, 0, 3] == pytest.approx(128 / 255)


def test_decode_rgb_jpeg_gets_opaque_alpha():
    buf = io.BytesIO()
    Image.new("RGB", (16, 8), (0, 0, 255)).save(buf, format="JPEG")
    src = decode_image(buf.getvalue())
    assert src.mime_type == "image/jpeg"
    assert np.all(src.pixels[..., 3] == 1.0)


def test_caller_mime_type_wins():
    src = decode_image(png_bytes(solid_rgba(4, 4)), mime_type="image/x-custom")
    assert src.mime_type == "image/x-custom"


@pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n truncated"])
def test_undecodable_bytes_raise_load_error(data):
    with pytest.raises(LoadError):
        decode_image(data)


def test_oversized_image_raises_load_error(monkeypatch):
    data = png_bytes(solid_rgba(16, 16))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    with pytest.raises(LoadError):
        decode_image(data)


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError):
        load_image_file(str(tmp_path / "nope.png"))


def test_read_asset(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(png_bytes(solid_rgba(8, 8)))
    asset = read_asset(str(path))
    assert asset.name == "photo.png"
    assert asset.mime_type == "image/png"
    assert asset.data == path.read_bytes()


def test_as_source_accepts_all_inputs():
    data = png_bytes(solid_rgba(5, 3))
    src = as_source(data)
    assert as_source(src) is src
    assert as_source(ImageAsset(data=data)).size == (5, 3)
    with pytest.raises(LoadError):
        as_source("a/path/string.png")


def test_data_url_round_trip():
    asset = ImageAsset(data=b"\x00\x01payload", mime_type="image/webp", name="x")
    url = asset.to_data_url()
    assert url.startswith("data:image/webp;base64,")
    back = ImageAsset.from_data_url(url)
    assert back.data == asset.data
    assert back.mime_type == "image/webp"


def test_from_bare_base64_defaults_to_png():
    raw = base64.b64encode(b"abc").decode()
    asset = ImageAsset.from_data_url(raw)
    assert asset.data == b"abc"
    assert asset.mime_type == "image/png"


def test_clean_base64():
    assert clean_base64("data:image/jpeg;base64,QUJD") == "QUJD"
    assert clean_base64("QUJD") == "QUJD"


def test_encode_png_rounds_half_up():
    buf = np.full((2, 3, 3), 0.5, dtype=np.float32)
    out = decode_png(encode_png(buf))
    assert out.shape == (2, 3, 3)
    assert np.all(out == 128)


def test_buffer_to_asset():
    asset = buffer_to_asset(np.zeros((4, 4, 3), dtype=np.float32))
    assert asset.mime_type == "image/png"
    assert asset.name == "crop.png"
    assert isinstance(decode_image(asset.data), SourceImage)
