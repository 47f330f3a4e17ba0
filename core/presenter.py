"""
OpenCV window layout: header (heading, subtitle, FPS) above the video box.

The presenter only arranges pixels. Box mapping comes from core.geometry via
core.visual.project_detections, so the same Transform places both the camera
frame and the overlay.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from core.config import Settings
from core.models import Detection, Transform, VideoGeometry
from core.visual import CanvasSurface, OverlayStyle, hex_to_bgr, project_detections

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 84
QUIT_KEYS = (ord("q"), 27)  # q / Esc


class WindowPresenter:
    """Resizable HighGUI window showing the live video with its overlay."""

    def __init__(self, settings: Settings, surface: Optional[CanvasSurface] = None):
        self.s = settings
        self.title = settings.WINDOW_TITLE
        self.style = OverlayStyle.from_settings(settings)
        self.surface = surface or CanvasSurface()
        self.last_page: Optional[np.ndarray] = None

    # ---- lifecycle ----
    def open(self) -> None:
        cv2.namedWindow(self.title, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.title, self.s.DISPLAY_WIDTH, self.s.DISPLAY_HEIGHT + HEADER_HEIGHT)
        logger.debug(f"[presenter] window '{self.title}' opened")

    def close(self) -> None:
        cv2.destroyAllWindows()

    # ---- layout ----
    def display_size(self) -> Tuple[int, int]:
        """Size of the video box as currently shown (window minus header)."""
        try:
            _x, _y, w, h = cv2.getWindowImageRect(self.title)
        except cv2.error:
            w, h = -1, -1
        if w < 0 or h < 0:
            # Backend cannot report the window size
            return self.s.DISPLAY_WIDTH, self.s.DISPLAY_HEIGHT
        return int(w), max(0, int(h) - HEADER_HEIGHT)

    def read_geometry(self, video) -> VideoGeometry:
        w, h = self.display_size()
        return VideoGeometry(
            intrinsic_width=video.intrinsic_width,
            intrinsic_height=video.intrinsic_height,
            display_width=w,
            display_height=h,
        )

    def _header(self, width: int, fps: Optional[float]) -> np.ndarray:
        header = np.zeros((HEADER_HEIGHT, width, 3), dtype=np.uint8)
        if width == 0:
            return header
        cv2.putText(header, self.s.HEADING, (10, 26), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                    (255, 255, 255), 2, cv2.LINE_AA)
        cv2.putText(header, self.s.SUBHEADING, (10, 50), cv2.FONT_HERSHEY_SIMPLEX, 0.5,
                    (200, 200, 200), 1, cv2.LINE_AA)
        fps_text = f"FPS: {fps:.1f}" if fps is not None else "FPS: --"
        cv2.putText(header, fps_text, (10, 76), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                    hex_to_bgr(self.s.BOX_COLOR), 2, cv2.LINE_AA)
        return header

    @staticmethod
    def _place_video(box: np.ndarray, frame: np.ndarray, geometry: VideoGeometry, t: Transform) -> None:
        vw = int(round(geometry.intrinsic_width * t.scale_x))
        vh = int(round(geometry.intrinsic_height * t.scale_y))
        if vw <= 0 or vh <= 0:
            return
        interp = cv2.INTER_AREA if t.scale_x < 1.0 else cv2.INTER_LINEAR
        resized = cv2.resize(frame, (vw, vh), interpolation=interp)

        ox, oy = int(round(t.offset_x)), int(round(t.offset_y))
        bh, bw = box.shape[:2]
        x0, y0 = max(0, ox), max(0, oy)
        x1, y1 = min(bw, ox + vw), min(bh, oy + vh)
        if x1 <= x0 or y1 <= y0:
            return
        box[y0:y1, x0:x1] = resized[y0 - oy:y1 - oy, x0 - ox:x1 - ox]

    def compose(self,
                frame: np.ndarray,
                detections: List[Detection],
                geometry: VideoGeometry,
                fps: Optional[float]) -> np.ndarray:
        """Header stacked over the fitted video + overlay."""
        dw, dh = geometry.display_width, geometry.display_height
        box = np.zeros((dh, dw, 3), dtype=np.uint8)
        t = project_detections(self.surface, geometry, detections, self.style)
        if t is not None:
            self._place_video(box, frame, geometry, t)
            box = self.surface.composite(box)
        return np.vstack([self._header(dw, fps), box])

    # ---- per frame ----
    def render(self,
               frame: np.ndarray,
               detections: List[Detection],
               geometry: VideoGeometry,
               fps: Optional[float]) -> None:
        page = self.compose(frame, detections, geometry, fps)
        self.last_page = page
        if page.shape[1] == 0:
            logger.debug("[presenter] window has zero width; nothing to show")
            return
        cv2.imshow(self.title, page)

    def wait_next_frame(self, token) -> None:
        """Pump the window event loop once; quit key or closed window cancels the token."""
        key = cv2.waitKey(1) & 0xFF
        if key in QUIT_KEYS:
            logger.info("[presenter] quit key pressed")
            token.cancel()
            return
        try:
            visible = cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE)
        except cv2.error:
            visible = 0
        if visible < 1:
            logger.info("[presenter] window closed")
            token.cancel()
