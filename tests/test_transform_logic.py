import numpy as np
import pytest
from editstudio.domain.errors import RenderError
from editstudio.domain.models import SourceImage, ViewTransform
from editstudio.features.transform.logic import (
    canvas_to_image_coords,
    clamp_scale,
    compute_max_scale,
    compute_min_scale,
    dim_outside,
    flatten_alpha,
    render_view,
    view_matrix,
)

WHITE = (1.0, 1.0, 1.0)


def _source(width, height, rgba=(1.0, 0.0, 0.0, 1.0)):
    pixels = np.zeros((height, width, 4), dtype=np.float32)
    pixels[...] = rgba
    return SourceImage(pixels=pixels)


def test_min_scale_covers_mask_on_both_axes():
    assert compute_min_scale(2000, 1000, 500) == 0.5
    assert compute_min_scale(1000, 2000, 500) == 0.5
    assert compute_min_scale(100, 100, 300) == 3.0


def test_max_scale_is_multiple_of_min_scale():
    assert compute_max_scale(0.5, 4.0) == 2.0


def test_max_scale_ceiling_never_below_min_scale():
    assert compute_max_scale(0.5, 4.0, ceiling=1.0) == 1.0
    assert compute_max_scale(0.5, 4.0, ceiling=0.1) == 0.5


@pytest.mark.parametrize("value", [-10.0, 0.0, 0.25, 0.5, 1.3, 2.0, 50.0])
def test_clamp_scale_stays_in_range(value):
    res = clamp_scale(value, 0.5, 2.0)
    assert 0.5 <= res <= 2.0


def test_view_matrix_maps_image_center_to_surface_center():
    m = view_matrix(ViewTransform(scale=0.5), (2000, 1000), 500)
    # Pixel-center coordinates: image center is (999.5, 499.5)
    x, y = m @ np.array([999.5, 499.5, 1.0])
    assert x == pytest.approx(249.5)
    assert y == pytest.approx(249.5)


def test_view_matrix_scales_offset_by_ratio():
    t = ViewTransform(scale=0.5, offset_x=10.0, offset_y=-4.0)
    m = view_matrix(t, (2000, 1000), 1024, ratio=2.048)
    assert m[0, 0] == pytest.approx(1.024)
    # center + offset * ratio - s * w / 2, plus the half-pixel correction
    assert m[0, 2] == pytest.approx(512 + 10.0 * 2.048 - 1024 + 0.512 - 0.5)
    assert m[1, 2] == pytest.approx(512 - 4.0 * 2.048 - 512 + 0.512 - 0.5)


def test_flatten_alpha_uses_background_for_transparent_pixels():
    pixels = np.zeros((1, 2, 4), dtype=np.float32)
    pixels[0, 0] = (1.0, 0.0, 0.0, 1.0)
    pixels[0, 1] = (1.0, 0.0, 0.0, 0.0)
    flat = flatten_alpha(pixels, WHITE)
    assert np.allclose(flat[0, 0], (1.0, 0.0, 0.0))
    assert np.allclose(flat[0, 1], WHITE)


def test_render_view_covers_surface_at_min_scale():
    src = _source(200, 100)
    out = render_view(src, ViewTransform(scale=0.5), 50, WHITE)
    assert out.shape == (50, 50, 3)
    assert out.dtype == np.float32
    assert np.allclose(out[..., 0], 1.0, atol=1e-4)
    assert np.allclose(out[..., 1:], 0.0, atol=1e-4)


def test_render_view_panned_out_shows_background():
    src = _source(200, 100)
    out = render_view(src, ViewTransform(scale=0.5, offset_x=500.0), 50, WHITE)
    assert np.allclose(out, 1.0)


def test_render_view_rejects_invalid_surface():
    with pytest.raises(RenderError):
        render_view(_source(10, 10), ViewTransform(), 0, WHITE)


def test_dim_outside_leaves_mask_untouched():
    surface = np.ones((10, 10, 3), dtype=np.float32)
    dim_outside(surface, (2, 2, 6, 6), 0.7)
    assert np.allclose(surface[2:8, 2:8], 1.0)
    assert np.allclose(surface[0, 0], 0.3)
    assert np.allclose(surface[5, 9], 0.3)


def test_canvas_to_image_coords_inverts_view():
    t = ViewTransform(scale=0.5, offset_x=20.0, offset_y=0.0)
    x, y = canvas_to_image_coords((270.0, 250.0), t, (2000, 1000), 500)
    assert (x, y) == pytest.approx((1000.0, 500.0))
