from typing import Optional, Tuple
from editstudio.domain.models import GenerationResult, HistoryEntry, ImageAsset


class EditHistory:
    """
    Undo/redo over accepted edits.

    index == -1 is the original state with no edit applied. A new edit made
    after undoing drops the abandoned future branch. Entries live in an
    immutable tuple rebuilt on every append. Invalid transitions are no-ops.
    """

    def __init__(self) -> None:
        self._entries: Tuple[HistoryEntry, ...] = ()
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return self._entries

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index >= 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    @property
    def active_entry(self) -> Optional[HistoryEntry]:
        if self._index < 0:
            return None
        return self._entries[self._index]

    @property
    def active_result(self) -> Optional[GenerationResult]:
        entry = self.active_entry
        return entry.result if entry else None

    @property
    def active_input(self) -> Optional[ImageAsset]:
        entry = self.active_entry
        if entry is not None:
            return entry.originating_input
        if self._entries:
            return self._entries[0].originating_input
        return None

    def apply_edit(self, entry: HistoryEntry) -> None:
        self._entries = self._entries[: self._index + 1] + (entry,)
        self._index = len(self._entries) - 1

    def undo(self) -> None:
        if self._index >= 0:
            self._index -= 1

    def redo(self) -> None:
        if self._index < len(self._entries) - 1:
            self._index += 1

    def reset(self) -> None:
        self._entries = ()
        self._index = -1
