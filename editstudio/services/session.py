from typing import Optional, Sequence
from editstudio.domain.errors import EditBusyError, EditError, StaleEditError
from editstudio.domain.interfaces import IEditService
from editstudio.domain.models import (
    AppMode,
    CropConfig,
    EditRequest,
    GenerationResult,
    HistoryEntry,
    ImageAsset,
    SavedImage,
)
from editstudio.features.history.stack import EditHistory
from editstudio.features.transform.engine import TransformEngine
from editstudio.kernel.system.config import APP_CONFIG, DEFAULT_CROP_CONFIG
from editstudio.kernel.system.logging import get_logger
from editstudio.services.library import AssetLibrary

logger = get_logger(__name__)


class EditSession:
    """
    Per-mode editing workspace.

    Owns the crop engine, the edit history and the cumulative input: the
    image the next edit starts from. Every accepted edit becomes that input,
    so successive edits build on each other. Reference images passed to an
    edit are used once and never become the input.

    At most one edit request may be in flight; further submissions are
    rejected, not queued. A request that outlives a mode change is
    discarded with StaleEditError.
    """

    def __init__(
        self,
        service: IEditService,
        mode: AppMode = AppMode.GENERAL,
        config: CropConfig = DEFAULT_CROP_CONFIG,
        library: Optional[AssetLibrary] = None,
        model_id: Optional[str] = None,
        credential: Optional[str] = None,
    ):
        self.service = service
        self.mode = mode
        self.engine = TransformEngine(config)
        self.history = EditHistory()
        self.library = library if library is not None else AssetLibrary()
        self.model_id = model_id or APP_CONFIG.model_id
        self.credential = credential

        self.active_input: Optional[ImageAsset] = None
        self.last_error: Optional[EditError] = None
        self._busy = False
        # Bumped on mode change; results from an older generation are dropped
        self._generation = 0

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def active_result(self) -> Optional[GenerationResult]:
        return self.history.active_result

    def set_input(self, asset: Optional[ImageAsset]) -> None:
        self.active_input = asset

    def load_image(self, asset: ImageAsset) -> None:
        """
        Puts an upload into the cropper; it also becomes the next edit's base.
        """
        self.engine.initialize(asset)
        self.active_input = asset

    def export_crop(self, output_size: Optional[int] = None) -> ImageAsset:
        cropped = self.engine.export_crop(output_size)
        self.active_input = cropped
        return cropped

    async def submit(
        self,
        prompt: str,
        base_image: Optional[ImageAsset] = None,
        reference_images: Sequence[ImageAsset] = (),
    ) -> GenerationResult:
        if self._busy:
            logger.warning("Edit rejected: another request is in flight")
            raise EditBusyError("An edit is already in progress")

        base = base_image if base_image is not None else self.active_input
        request = EditRequest(
            prompt=prompt,
            model_id=self.model_id,
            base_image=base,
            reference_images=tuple(reference_images),
            credential=self.credential,
        )

        self._busy = True
        self.last_error = None
        generation = self._generation
        try:
            image = await self.service.generate(request)
        except EditError as e:
            logger.error(f"Edit failed ({type(e).__name__}): {e}")
            if generation == self._generation:
                self.last_error = e
            raise
        finally:
            self._busy = False

        if generation != self._generation:
            logger.warning(f"Discarding edit \"{prompt}\": mode changed while it was running")
            raise StaleEditError("Mode changed before the edit finished")

        result = GenerationResult(image=image, prompt=prompt)
        self.history.apply_edit(HistoryEntry(result=result, originating_input=base))
        self.active_input = image
        logger.info(
            f"Edit {self.history.index + 1}/{len(self.history)} applied in {self.mode.value}"
        )
        return result

    def undo(self) -> None:
        self.history.undo()
        self._follow_history()

    def redo(self) -> None:
        self.history.redo()
        self._follow_history()

    def change_mode(self, mode: AppMode) -> None:
        """
        Switches mode and drops every piece of per-mode state together.
        """
        self._generation += 1
        self.mode = mode
        self.engine.unload()
        self.history.reset()
        self.active_input = None
        self.last_error = None
        logger.info(f"Switched to {mode.label}")

    def send_to_library(self) -> Optional[SavedImage]:
        result = self.history.active_result
        if result is None:
            return None
        return self.library.save(result, self.history.active_input, self.mode)

    def _follow_history(self) -> None:
        # Nothing recorded yet: keep whatever base the user picked
        if not len(self.history):
            return
        result = self.history.active_result
        self.active_input = result.image if result else self.history.active_input
