from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot
from editstudio.domain.errors import RenderError
from editstudio.features.transform.engine import CropJob
from editstudio.kernel.system.logging import get_logger

logger = get_logger(__name__)


class ExportWorker(QObject):
    """
    Renders crop exports in a background thread.
    A started export always runs to completion.
    """

    finished = pyqtSignal(object)  # ImageAsset
    error = pyqtSignal(str)

    @pyqtSlot(object)
    def run(self, job: CropJob) -> None:
        try:
            asset = job.run()
        except RenderError as e:
            logger.error(f"Export failed: {e}")
            self.error.emit(str(e))
            return
        self.finished.emit(asset)
