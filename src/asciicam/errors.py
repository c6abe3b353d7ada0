"""Error types raised by the capture and rendering pipeline."""


class CaptureError(Exception):
    """Base class for failures while acquiring a capture source."""


class PermissionDeniedError(CaptureError):
    """The operating system refused access to the camera device."""


class DeviceUnavailableError(CaptureError):
    """The camera device does not exist or could not be opened."""


class EmptyPaletteError(ValueError):
    """A palette with no characters was supplied."""
