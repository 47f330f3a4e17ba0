"""
Error taxonomy for the capture/inference driver.
"""


class OverlayError(RuntimeError):
    """Base class for failures raised by the live overlay."""


class MediaAccessError(OverlayError):
    """Camera could not be opened or never reported its frame size."""


class ModelLoadError(OverlayError):
    """Detection model could not be imported, fetched or initialized."""


class DetectionError(OverlayError):
    """Inference failed for a single frame."""
