# core/geometry.py
"""
Pure geometry for the overlay: intrinsic video pixels -> displayed pixels.

The camera frame is fitted into its display box preserving aspect ratio.
When the stream is relatively wider than the box, bars appear top/bottom
(letterbox); otherwise bars appear left/right (pillarbox). Nothing here
touches a drawing surface.
"""
from __future__ import annotations
from typing import Iterable, List, Optional

from core.models import Box, Detection, Transform, VideoGeometry


def compute_transform(geometry: VideoGeometry) -> Optional[Transform]:
    """
    Scale + offset that maps intrinsic coordinates into the display box.

    Returns None when any dimension is zero (stream not ready, or the box is
    hidden); callers treat that as "nothing to render this frame".
    """
    iw, ih = geometry.intrinsic_width, geometry.intrinsic_height
    dw, dh = geometry.display_width, geometry.display_height
    if iw <= 0 or ih <= 0 or dw <= 0 or dh <= 0:
        return None

    aspect_video = iw / ih
    aspect_display = dw / dh

    if aspect_video > aspect_display:
        # black bars top/bottom (letterbox)
        scale = dw / iw
        return Transform(scale_x=scale, scale_y=scale,
                         offset_x=0.0, offset_y=(dh - ih * scale) / 2)

    # black bars left/right (pillarbox); equal aspect lands here with zero offset
    scale = dh / ih
    return Transform(scale_x=scale, scale_y=scale,
                     offset_x=(dw - iw * scale) / 2, offset_y=0.0)


def map_box(box: Box, t: Transform) -> Box:
    return Box(
        x=box.x * t.scale_x + t.offset_x,
        y=box.y * t.scale_y + t.offset_y,
        width=box.width * t.scale_x,
        height=box.height * t.scale_y,
    )


def unmap_box(box: Box, t: Transform) -> Box:
    """Inverse of map_box: displayed pixels back to intrinsic pixels."""
    return Box(
        x=(box.x - t.offset_x) / t.scale_x,
        y=(box.y - t.offset_y) / t.scale_y,
        width=box.width / t.scale_x,
        height=box.height / t.scale_y,
    )


def visible_detections(detections: Iterable[Detection], threshold: float = 0.3) -> List[Detection]:
    """Keep detections strictly above threshold, in model order."""
    return [d for d in detections if d.confidence > threshold]


def format_label(det: Detection) -> str:
    return f"{det.category} {det.confidence * 100:.1f}%"


def compute_fps(previous_ms: float, now_ms: float) -> Optional[float]:
    """Instantaneous FPS from two completion timestamps, one decimal."""
    elapsed = now_ms - previous_ms
    if elapsed <= 0:
        return None
    return round(1000.0 / elapsed, 1)
