"""
Configuration for the live detection overlay.
"""
from pydantic import BaseModel
import os
import re

MODEL_VARIANTS = ("lite", "full")
DETECTION_ERROR_POLICIES = ("stop", "skip")
DEFAULT_BOX_COLOR = "#00FFFF"
DEFAULT_LABEL_TEXT_COLOR = "#000000"

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def _normalize_color(value: str | None, default: str) -> str:
    """RRGGBB or #rrggbb -> #RRGGBB; anything else falls back to default."""
    m = _HEX_COLOR.match((value or "").strip())
    return "#" + m.group(1).upper() if m else default


class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    DEVICE: str = (os.getenv("DEVICE", "cpu") or "cpu")

    # Camera
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    CAPTURE_WIDTH: int = int(os.getenv("CAPTURE_WIDTH", "0"))      # 0 = camera default
    CAPTURE_HEIGHT: int = int(os.getenv("CAPTURE_HEIGHT", "0"))
    CAMERA_READY_TIMEOUT: float = float(os.getenv("CAMERA_READY_TIMEOUT", "5"))

    # Model
    MODEL_VARIANT: str = os.getenv("MODEL_VARIANT", "lite")
    MODEL_PATH: str | None = os.getenv("MODEL_PATH") or None
    CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.3"))
    ON_DETECTION_ERROR: str = os.getenv("ON_DETECTION_ERROR", "stop")

    # Overlay styling
    BOX_COLOR: str = os.getenv("BOX_COLOR", DEFAULT_BOX_COLOR)
    LABEL_TEXT_COLOR: str = os.getenv("LABEL_TEXT_COLOR", DEFAULT_LABEL_TEXT_COLOR)
    STROKE_WIDTH: int = int(os.getenv("STROKE_WIDTH", "3"))
    LABEL_PADDING: int = int(os.getenv("LABEL_PADDING", "4"))
    FONT_PX: int = int(os.getenv("FONT_PX", "16"))

    # Window
    DISPLAY_WIDTH: int = int(os.getenv("DISPLAY_WIDTH", "640"))
    DISPLAY_HEIGHT: int = int(os.getenv("DISPLAY_HEIGHT", "480"))
    WINDOW_TITLE: str = os.getenv("WINDOW_TITLE", "Live Object Detection (q to quit)")
    HEADING: str = os.getenv("HEADING", "Makers - Real-Time Object Detection (COCO)")
    SUBHEADING: str = os.getenv("SUBHEADING", "YOLOv8 - 80 Classes")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize DEVICE: strip comments/extra words, lower-case, validate
        dev = (self.DEVICE or "cpu").strip().split()[0].lower()
        if dev not in ("cpu", "cuda", "mps"):
            dev = "cpu"
        object.__setattr__(self, "DEVICE", dev)

        variant = (self.MODEL_VARIANT or "lite").strip().lower()
        if variant not in MODEL_VARIANTS:
            variant = "lite"
        object.__setattr__(self, "MODEL_VARIANT", variant)

        policy = (self.ON_DETECTION_ERROR or "stop").strip().lower()
        if policy not in DETECTION_ERROR_POLICIES:
            policy = "stop"
        object.__setattr__(self, "ON_DETECTION_ERROR", policy)

        object.__setattr__(self, "BOX_COLOR", _normalize_color(self.BOX_COLOR, DEFAULT_BOX_COLOR))
        object.__setattr__(self, "LABEL_TEXT_COLOR", _normalize_color(self.LABEL_TEXT_COLOR, DEFAULT_LABEL_TEXT_COLOR))

        object.__setattr__(self, "LOG_LEVEL", (self.LOG_LEVEL or "INFO").strip().upper())
