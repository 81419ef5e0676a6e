import os
import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PyQt6.QtWidgets")

from conftest import png_bytes, solid_rgba  # noqa: E402
from editstudio.desktop.converters import ImageConverter  # noqa: E402
from editstudio.desktop.view.crop_canvas import CropCanvas  # noqa: E402
from editstudio.desktop.view.crop_dialog import CropDialog  # noqa: E402
from editstudio.desktop.workers.export import ExportWorker  # noqa: E402
from editstudio.domain.models import CropConfig  # noqa: E402
from editstudio.features.pointer.controller import PointerKind  # noqa: E402
from editstudio.features.transform.engine import TransformEngine  # noqa: E402

CONFIG = CropConfig(canvas_size=400, mask_size=300, output_size=64)


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def engine():
    e = TransformEngine(CONFIG)
    e.initialize(png_bytes(solid_rgba(600, 300)))
    return e


def test_converter_keeps_size(qapp):
    img = ImageConverter.to_qimage(np.zeros((30, 50, 3), dtype=np.float32))
    assert (img.width(), img.height()) == (50, 30)


def test_converter_handles_odd_widths(qapp):
    buf = np.zeros((7, 13, 3), dtype=np.uint8)
    buf[..., 0] = 255
    img = ImageConverter.to_qimage(buf)
    assert img.pixelColor(12, 6).red() == 255
    assert img.pixelColor(12, 6).blue() == 0


def test_canvas_remaps_widget_drag(qapp, engine):
    canvas = CropCanvas(engine)
    canvas.resize(200, 200)
    canvas._layout()

    changes = []
    canvas.view_changed.connect(lambda: changes.append(True))
    canvas._dispatch(PointerKind.DOWN, 50, 50)
    canvas._dispatch(PointerKind.MOVE, 60, 45)
    canvas._dispatch(PointerKind.UP, 60, 45)

    # 400px backing shown at 200px
    assert engine.offset == (20, -10)
    assert changes == [True]


def test_canvas_touch_move_prevents_default(qapp, engine):
    canvas = CropCanvas(engine)
    canvas.resize(400, 400)
    canvas._layout()
    canvas._dispatch(PointerKind.TOUCH_START, 10, 10)
    assert canvas._dispatch(PointerKind.TOUCH_MOVE, 12, 10)


def test_worker_emits_asset(qapp, engine):
    worker = ExportWorker()
    got, errors = [], []
    worker.finished.connect(got.append)
    worker.error.connect(errors.append)
    worker.run(engine.snapshot())
    assert not errors
    assert got[0].mime_type == "image/png"


def test_worker_reports_render_error(qapp, engine):
    worker = ExportWorker()
    errors = []
    worker.error.connect(errors.append)
    worker.run(engine.snapshot(0))
    assert errors


def test_dialog_slider_drives_zoom(qapp, engine):
    dialog = CropDialog(engine)
    try:
        dialog.zoom_slider.setValue(100)
        assert engine.transform.scale == pytest.approx(engine.max_scale)
        engine.reset()
        dialog.canvas.view_changed.emit()
        assert dialog.zoom_slider.value() == 0
    finally:
        dialog.done(0)
