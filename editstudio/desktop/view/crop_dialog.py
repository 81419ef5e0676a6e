from PyQt6.QtCore import Qt, QThread, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QVBoxLayout,
)
from editstudio.desktop.view.crop_canvas import CropCanvas
from editstudio.desktop.workers.export import ExportWorker
from editstudio.domain.errors import RenderError
from editstudio.features.transform.engine import TransformEngine
from editstudio.kernel.system.logging import get_logger

logger = get_logger(__name__)

SLIDER_STEPS = 100


class CropDialog(QDialog):
    """
    "Adjust Frame" dialog: drag to position, slider to zoom, Apply exports.
    """

    crop_completed = pyqtSignal(object)  # ImageAsset
    export_requested = pyqtSignal(object)  # CropJob

    def __init__(self, engine: TransformEngine, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Adjust Frame")
        self.engine = engine

        self.canvas = CropCanvas(engine, self)
        self.zoom_slider = QSlider(Qt.Orientation.Horizontal)
        self.zoom_slider.setRange(0, SLIDER_STEPS)
        self.status = QLabel("")
        self.apply_btn = QPushButton("Apply Crop")
        self.cancel_btn = QPushButton("Cancel")

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(QLabel("Zoom"))
        zoom_row.addWidget(self.zoom_slider)

        buttons = QHBoxLayout()
        buttons.addWidget(self.status, 1)
        buttons.addWidget(self.cancel_btn)
        buttons.addWidget(self.apply_btn)

        layout = QVBoxLayout(self)
        layout.addWidget(self.canvas, 1)
        layout.addLayout(zoom_row)
        layout.addLayout(buttons)

        self._export_thread = QThread(self)
        self._export_worker = ExportWorker()
        self._export_worker.moveToThread(self._export_thread)
        self._export_thread.start()

        self._connect_signals()
        self._sync_slider()

    def _connect_signals(self) -> None:
        self.zoom_slider.valueChanged.connect(self._on_slider)
        self.canvas.view_changed.connect(self._sync_slider)
        self.apply_btn.clicked.connect(self.apply)
        self.cancel_btn.clicked.connect(self.reject)

        self.export_requested.connect(self._export_worker.run)
        self._export_worker.finished.connect(self._on_export_finished)
        self._export_worker.error.connect(self._on_export_error)

    def _sync_slider(self) -> None:
        self.zoom_slider.blockSignals(True)
        self.zoom_slider.setValue(round(self.engine.zoom_fraction * SLIDER_STEPS))
        self.zoom_slider.blockSignals(False)

    def _on_slider(self, value: int) -> None:
        self.engine.set_zoom_fraction(value / SLIDER_STEPS)
        self.canvas.refresh()

    def apply(self) -> None:
        try:
            job = self.engine.snapshot()
        except RenderError as e:
            self._on_export_error(str(e))
            return
        self.apply_btn.setEnabled(False)
        self.status.setText("Exporting...")
        self.export_requested.emit(job)

    def _on_export_finished(self, asset) -> None:
        self.apply_btn.setEnabled(True)
        self.status.setText("")
        self.crop_completed.emit(asset)
        self.accept()

    def _on_export_error(self, message: str) -> None:
        self.apply_btn.setEnabled(True)
        self.status.setText(f"Export failed: {message}")

    def done(self, result: int) -> None:
        self._export_thread.quit()
        self._export_thread.wait()
        super().done(result)
