"""
Pydantic data models for detections, frame geometry and loop state.
"""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, Literal


class Box(BaseModel):
    x: float
    y: float
    width: float
    height: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


class Detection(BaseModel):
    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    box: Box


class VideoGeometry(BaseModel):
    intrinsic_width: int = Field(ge=0)
    intrinsic_height: int = Field(ge=0)
    display_width: int = Field(ge=0)
    display_height: int = Field(ge=0)


class Transform(BaseModel):
    scale_x: float
    scale_y: float
    offset_x: float
    offset_y: float


# loop state


class FrameTiming(BaseModel):
    previous_ms: float


class SessionState(BaseModel):
    timing: FrameTiming
    frames_rendered: int = 0
    frames_skipped: int = 0
    fps: Optional[float] = None
    stop_reason: Optional[Literal["cancelled", "stream_ended", "detection_error"]] = None
