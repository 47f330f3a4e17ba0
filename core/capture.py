"""
Camera acquisition with OpenCV.
"""
# core/capture.py
from __future__ import annotations
import logging
import time
from typing import Callable, Optional

import cv2
import numpy as np

from core.config import Settings
from core.errors import MediaAccessError

logger = logging.getLogger(__name__)

READY_POLL_SEC = 0.05


class VideoHandle:
    """An opened camera whose intrinsic frame size is known."""

    def __init__(self, cap, width: int, height: int, camera_index: int = 0):
        self._cap = cap
        self._width = int(width)
        self._height = int(height)
        self.camera_index = camera_index

    @property
    def intrinsic_width(self) -> int:
        return self._width

    @property
    def intrinsic_height(self) -> int:
        return self._height

    def read(self) -> Optional[np.ndarray]:
        """Latest frame, or None once the stream has ended."""
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug(f"[capture] released camera index {self.camera_index}")


def acquire_video_source(settings: Settings,
                         camera_index: Optional[int] = None,
                         clock: Callable[[], float] = time.monotonic) -> VideoHandle:
    """
    Open the camera (video only) and block until it delivers a frame.

    The first good frame is the readiness signal: it fixes the intrinsic
    width/height for the lifetime of the handle.

    Raises:
        MediaAccessError: the device cannot be opened, or no frame arrived
            within CAMERA_READY_TIMEOUT seconds.
    """
    cam_idx = settings.CAMERA_INDEX if camera_index is None else camera_index
    logger.info(f"[capture] opening camera index {cam_idx}")
    cap = cv2.VideoCapture(cam_idx)
    if not cap.isOpened():
        raise MediaAccessError(f"Could not open camera index {cam_idx}")

    if settings.CAPTURE_WIDTH > 0 and settings.CAPTURE_HEIGHT > 0:
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, settings.CAPTURE_WIDTH)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.CAPTURE_HEIGHT)

    deadline = clock() + max(0.0, settings.CAMERA_READY_TIMEOUT)
    while True:
        ok, frame = cap.read()
        if ok and frame is not None and frame.shape[0] > 0 and frame.shape[1] > 0:
            h, w = frame.shape[:2]
            logger.info(f"[capture] camera {cam_idx} ready: {w}x{h}")
            return VideoHandle(cap, w, h, camera_index=cam_idx)
        if clock() >= deadline:
            cap.release()
            raise MediaAccessError(
                f"Camera index {cam_idx} delivered no frames within {settings.CAMERA_READY_TIMEOUT}s"
            )
        time.sleep(READY_POLL_SEC)
