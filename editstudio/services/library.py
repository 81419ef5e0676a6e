from typing import List, Optional
from editstudio.domain.models import AppMode, GenerationResult, ImageAsset, SavedImage
from editstudio.kernel.system.logging import get_logger

logger = get_logger(__name__)


def target_app_name(mode: AppMode) -> str:
    return mode.target_app


class AssetLibrary:
    """
    In-memory collection of results the user sent to a target app.
    Newest first.
    """

    def __init__(self) -> None:
        self._items: List[SavedImage] = []

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[SavedImage]:
        return list(self._items)

    def save(
        self,
        result: GenerationResult,
        original: Optional[ImageAsset],
        mode: AppMode,
    ) -> SavedImage:
        saved = SavedImage(result=result, mode=mode, original_image=original)
        self._items.insert(0, saved)
        logger.info(f"Image {saved.id} sent to {target_app_name(mode)}")
        return saved

    def for_mode(self, mode: AppMode) -> List[SavedImage]:
        return [item for item in self._items if item.mode == mode]

    def clear(self) -> None:
        self._items.clear()
