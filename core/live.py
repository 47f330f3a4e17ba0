# core/live.py
"""
Live (real-time) detection overlay.

Opens the webcam, loads the detector once, then loops once per window
refresh:
- request detections for the current frame
- update the rolling FPS readout
- project boxes/labels over the displayed video

The loop runs until its CancellationToken is cancelled (quit key, window
closed, signal handler) or the camera stream ends.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import cv2

from core.capture import acquire_video_source
from core.config import Settings
from core.detector import load_model
from core.errors import DetectionError, MediaAccessError, ModelLoadError
from core.geometry import compute_fps
from core.models import FrameTiming, SessionState
from core.presenter import WindowPresenter

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe stop flag owned by one running loop."""
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def new_session(clock: Callable[[], float] = time.perf_counter) -> SessionState:
    return SessionState(timing=FrameTiming(previous_ms=clock() * 1000.0))


def run_detection_loop(video,
                       model,
                       presenter,
                       settings: Settings,
                       token: Optional[CancellationToken] = None,
                       state: Optional[SessionState] = None,
                       clock: Callable[[], float] = time.perf_counter) -> SessionState:
    """
    Detect -> time -> render -> wait for the next refresh, until cancelled.

    `state` is updated in place and returned, so a caller that passes one in
    still sees the counters when DetectionError propagates.

    Per-frame DetectionError follows settings.ON_DETECTION_ERROR:
      - "stop": stop_reason="detection_error" and re-raise
      - "skip": count the frame as skipped, keep the previous timestamp, continue
    """
    token = token or CancellationToken()
    state = state or new_session(clock)

    logger.info("[live] detection loop started")
    while not token.cancelled:
        frame = video.read()
        if frame is None:
            logger.warning("[live] camera stream ended")
            state.stop_reason = "stream_ended"
            break

        try:
            detections = model.detect(frame)
        except DetectionError:
            if settings.ON_DETECTION_ERROR == "skip":
                state.frames_skipped += 1
                logger.warning("[live] detection failed; skipping frame", exc_info=True)
                presenter.wait_next_frame(token)
                continue
            state.stop_reason = "detection_error"
            raise

        now_ms = clock() * 1000.0
        fps = compute_fps(state.timing.previous_ms, now_ms)
        state.timing.previous_ms = now_ms
        if fps is not None:
            state.fps = fps

        # Display size can change between frames (window resize); re-read every time
        geometry = presenter.read_geometry(video)
        presenter.render(frame, detections, geometry, state.fps)
        state.frames_rendered += 1
        logger.debug(f"[live] frame={state.frames_rendered} dets={len(detections)} fps={state.fps}")

        presenter.wait_next_frame(token)

    if state.stop_reason is None:
        state.stop_reason = "cancelled"
    return state


def run_live_overlay(settings: Settings,
                     camera_index: Optional[int] = None,
                     token: Optional[CancellationToken] = None,
                     on_ready: Optional[Callable[[], None]] = None) -> Optional[SessionState]:
    """
    Open webcam, load the detector, and show the overlay window until stopped.

    Setup failures (camera, model or window) are logged and the loop never
    starts; returns None in that case. `on_ready` is called once setup is
    done, just before the first frame. Press 'q' or Esc to quit the window.
    """
    token = token or CancellationToken()

    try:
        video = acquire_video_source(settings, camera_index)
    except MediaAccessError:
        logger.exception("[live] error opening webcam")
        return None

    try:
        model = load_model(settings)
    except ModelLoadError:
        logger.exception("[live] error loading detection model")
        video.release()
        return None
    except KeyboardInterrupt:
        video.release()
        raise

    presenter = WindowPresenter(settings)
    try:
        presenter.open()
    except cv2.error:
        logger.exception("[live] error opening window")
        video.release()
        return None

    state = new_session()
    try:
        if on_ready is not None:
            on_ready()
        run_detection_loop(video, model, presenter, settings, token=token, state=state)
    except DetectionError:
        logger.exception("[live] detection failed; stopping")
    finally:
        video.release()
        presenter.close()

    logger.info(f"[live] stopped ({state.stop_reason}) after {state.frames_rendered} frames")
    return state
