import os
import sys
from PyQt6.QtWidgets import QApplication, QFileDialog, QMessageBox
from editstudio.domain.errors import LoadError
from editstudio.domain.models import ImageAsset
from editstudio.features.transform.engine import TransformEngine
from editstudio.infrastructure.loaders.image_loader import load_image_file
from editstudio.kernel.system.config import APP_CONFIG, BASE_USER_DIR, DEFAULT_CROP_CONFIG
from editstudio.kernel.system.logging import get_logger, setup_logging
from editstudio.desktop.view.crop_dialog import CropDialog

logger = get_logger(__name__)


def _bootstrap_environment() -> None:
    """Ensure user directories exist."""
    for d in (BASE_USER_DIR, APP_CONFIG.cache_dir, APP_CONFIG.default_export_dir):
        os.makedirs(d, exist_ok=True)


def _save_crop(asset: ImageAsset, source_path: str) -> str:
    name = os.path.splitext(os.path.basename(source_path))[0]
    out_path = os.path.join(APP_CONFIG.default_export_dir, f"{name}_crop.png")
    with open(out_path, "wb") as f:
        f.write(asset.data)
    logger.info(f"Crop saved to {out_path}")
    return out_path


def main() -> None:
    """
    Desktop entry point: crop one image and save it to the export folder.
    """
    setup_logging()
    _bootstrap_environment()

    app = QApplication(sys.argv)
    app.setApplicationName("editstudio")
    app.setStyle("Fusion")

    path = sys.argv[1] if len(sys.argv) > 1 else ""
    if not path:
        path, _ = QFileDialog.getOpenFileName(
            None, "Open Image", "", "Images (*.png *.jpg *.jpeg *.webp *.bmp)"
        )
    if not path:
        sys.exit(0)

    engine = TransformEngine(DEFAULT_CROP_CONFIG)
    try:
        engine.initialize(load_image_file(path))
    except LoadError as e:
        QMessageBox.critical(None, "editstudio", str(e))
        sys.exit(1)

    dialog = CropDialog(engine)
    dialog.crop_completed.connect(lambda asset: _save_crop(asset, path))
    dialog.resize(640, 720)
    dialog.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
