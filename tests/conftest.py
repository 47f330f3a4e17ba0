import pytest
import numpy as np

from core.config import Settings
from core.models import Box, Detection


class RecordingSurface:
    """Render surface that records calls instead of drawing."""
    def __init__(self, char_width: float = 8.0):
        self.char_width = char_width
        self.calls = []

    def resize(self, width, height):
        self.calls.append(("resize", width, height))

    def clear(self):
        self.calls.append(("clear",))

    def stroke_rect(self, x, y, w, h, color, width):
        self.calls.append(("stroke_rect", x, y, w, h, color, width))

    def fill_rect(self, x, y, w, h, color):
        self.calls.append(("fill_rect", x, y, w, h, color))

    def draw_text(self, text, x, y, color, font_px):
        self.calls.append(("draw_text", text, x, y, color, font_px))

    def measure_text(self, text, font_px):
        return self.char_width * len(text)

    def names(self):
        return [c[0] for c in self.calls]


def make_detection(category="person", confidence=0.9, box=(100, 100, 50, 50)):
    x, y, w, h = box
    return Detection(category=category, confidence=confidence, box=Box(x=x, y=y, width=w, height=h))


@pytest.fixture
def settings():
    return Settings(CONFIDENCE_THRESHOLD=0.3, ON_DETECTION_ERROR="stop", CAMERA_READY_TIMEOUT=0.5)


@pytest.fixture
def recording_surface():
    return RecordingSurface()


@pytest.fixture
def hd_frame():
    return np.full((720, 1280, 3), 100, dtype=np.uint8)
