from typing import Protocol, runtime_checkable
from editstudio.domain.models import EditRequest, ImageAsset


@runtime_checkable
class IEditService(Protocol):
    """
    Generative edit collaborator.
    Returns the encoded result or raises one of the EditError subclasses.
    """

    async def generate(self, request: EditRequest) -> ImageAsset: ...
