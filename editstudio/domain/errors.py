class EditStudioError(Exception):
    """Base class for all errors raised by editstudio."""


class LoadError(EditStudioError):
    """The source image could not be decoded."""


class RenderError(EditStudioError):
    """An offscreen surface could not be allocated or rendered."""


class EditBusyError(EditStudioError):
    """An edit request is already in flight."""


class StaleEditError(EditStudioError):
    """An edit finished after its mode was left; its result was discarded."""


class EditError(EditStudioError):
    """Failure reported by the generative edit service."""


class SafetyBlockError(EditError):
    pass


class RecitationBlockError(EditError):
    pass


class MissingCredentialError(EditError):
    pass


class EmptyResponseError(EditError):
    pass


class EditNetworkError(EditError):
    pass
