"""Overlay painting helpers.

- RenderSurface: the drawing contract the projector needs (clear, rects, text, text width)
- CanvasSurface: transparent BGRA numpy canvas drawn with OpenCV, composited over a frame
- project_detections: fit the overlay to the video box and paint labeled boxes

Geometry lives in core.geometry; this module only paints what it computes.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Protocol, Tuple

import cv2
import numpy as np
from pydantic import BaseModel

from core.config import Settings
from core.geometry import compute_transform, format_label, map_box, visible_detections
from core.models import Detection, Transform, VideoGeometry

logger = logging.getLogger(__name__)


def hex_to_bgr(color: str) -> Tuple[int, int, int]:
    """'#RRGGBB' (or 'RRGGBB') -> OpenCV BGR tuple."""
    c = color.strip().lstrip("#")
    if len(c) != 6:
        raise ValueError(f"Expected #RRGGBB color, got {color!r}")
    r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    return (b, g, r)


class RenderSurface(Protocol):
    def resize(self, width: int, height: int) -> None: ...
    def clear(self) -> None: ...
    def stroke_rect(self, x: float, y: float, w: float, h: float, color: str, width: int) -> None: ...
    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None: ...
    def draw_text(self, text: str, x: float, y: float, color: str, font_px: int) -> None: ...
    def measure_text(self, text: str, font_px: int) -> float: ...


class OverlayStyle(BaseModel):
    threshold: float = 0.3
    box_color: str = "#00FFFF"
    text_color: str = "#000000"
    stroke_width: int = 3
    padding: int = 4
    font_px: int = 16

    @classmethod
    def from_settings(cls, settings: Settings) -> "OverlayStyle":
        return cls(
            threshold=settings.CONFIDENCE_THRESHOLD,
            box_color=settings.BOX_COLOR,
            text_color=settings.LABEL_TEXT_COLOR,
            stroke_width=settings.STROKE_WIDTH,
            padding=settings.LABEL_PADDING,
            font_px=settings.FONT_PX,
        )


class CanvasSurface:
    """Transparent BGRA canvas; alpha marks painted pixels."""

    def __init__(self, width: int = 0, height: int = 0,
                 font: int = cv2.FONT_HERSHEY_SIMPLEX, thickness: int = 1):
        self.font = font
        self.thickness = thickness
        self.canvas = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    def resize(self, width: int, height: int) -> None:
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) != (self.width, self.height):
            self.canvas = np.zeros((height, width, 4), dtype=np.uint8)

    def clear(self) -> None:
        self.canvas[:] = 0

    def _scale(self, font_px: int) -> float:
        return cv2.getFontScaleFromHeight(self.font, int(font_px), self.thickness)

    @staticmethod
    def _rgba(color: str) -> Tuple[int, int, int, int]:
        return (*hex_to_bgr(color), 255)

    def stroke_rect(self, x, y, w, h, color, width) -> None:
        p1 = (int(round(x)), int(round(y)))
        p2 = (int(round(x + w)), int(round(y + h)))
        cv2.rectangle(self.canvas, p1, p2, self._rgba(color), max(1, int(width)))

    def fill_rect(self, x, y, w, h, color) -> None:
        # cv2.rectangle includes p2, so the far corner is one pixel in
        if w <= 0 or h <= 0:
            return
        p1 = (int(round(x)), int(round(y)))
        p2 = (int(round(x + w)) - 1, int(round(y + h)) - 1)
        cv2.rectangle(self.canvas, p1, p2, self._rgba(color), cv2.FILLED)

    def measure_text(self, text: str, font_px: int) -> float:
        (tw, _th), _ = cv2.getTextSize(text, self.font, self._scale(font_px), self.thickness)
        return float(tw)

    def draw_text(self, text, x, y, color, font_px) -> None:
        # putText anchors at the baseline; shift down by the glyph height so y is the top
        scale = self._scale(font_px)
        (_tw, th), _ = cv2.getTextSize(text, self.font, scale, self.thickness)
        origin = (int(round(x)), int(round(y)) + th)
        cv2.putText(self.canvas, text, origin, self.font, scale,
                    self._rgba(color), self.thickness, cv2.LINE_AA)

    def composite(self, frame: np.ndarray) -> np.ndarray:
        """Alpha-blend the canvas over a BGR frame of the same size."""
        if frame.shape[:2] != self.canvas.shape[:2]:
            raise ValueError(
                f"Overlay is {self.width}x{self.height}, frame is {frame.shape[1]}x{frame.shape[0]}"
            )
        alpha = self.canvas[..., 3:4].astype(np.float32) / 255.0
        out = frame.astype(np.float32) * (1.0 - alpha) + self.canvas[..., :3].astype(np.float32) * alpha
        return out.astype(np.uint8)


def project_detections(surface: RenderSurface,
                       geometry: VideoGeometry,
                       detections: List[Detection],
                       style: Optional[OverlayStyle] = None) -> Optional[Transform]:
    """Fit the overlay to the displayed video box and paint labeled boxes.

    Args:
        surface: drawing surface aligned with the video box (same top-left origin)
        geometry: intrinsic + displayed size snapshot for this frame
        detections: model output in intrinsic pixel coordinates, in model order
        style: threshold and drawing constants

    Returns:
        The Transform used for this frame, or None when the box is empty and
        nothing was painted.
    """
    style = style or OverlayStyle()
    surface.resize(geometry.display_width, geometry.display_height)

    t = compute_transform(geometry)
    if t is None:
        logger.debug(f"[visual] empty geometry {geometry.model_dump()}; skipping overlay")
        return None

    surface.clear()
    for det in visible_detections(detections, style.threshold):
        box = map_box(det.box, t)
        text = format_label(det)

        surface.stroke_rect(box.x, box.y, box.width, box.height, style.box_color, style.stroke_width)

        text_w = surface.measure_text(text, style.font_px)
        surface.fill_rect(box.x, box.y, text_w + style.padding, style.font_px + style.padding, style.box_color)
        surface.draw_text(text, box.x, box.y, style.text_color, style.font_px)

    return t
