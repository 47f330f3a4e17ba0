"""Run the live object-detection overlay.

Usage:
    python scripts/live_overlay.py
    python scripts/live_overlay.py --variant full --threshold 0.4
    live-object-overlay --camera 1 --on-detection-error skip

Press 'q' (or Esc) to quit the window.
"""
from __future__ import annotations
import argparse
import logging
import signal
import sys

from core.config import Settings
from core.live import CancellationToken, run_live_overlay

logger = logging.getLogger(__name__)


def build_settings(argv=None) -> Settings:
    p = argparse.ArgumentParser(description="Webcam object detection with a box/label overlay")
    p.add_argument("--camera", type=int, default=None, help="Camera index (default: CAMERA_INDEX)")
    p.add_argument("--variant", choices=["lite", "full"], default=None,
                   help="lite = yolov8n (faster), full = yolov8s (more accurate)")
    p.add_argument("--model", default=None, help="Path to custom weights; overrides --variant")
    p.add_argument("--threshold", type=float, default=None, help="Minimum confidence to draw (exclusive)")
    p.add_argument("--on-detection-error", choices=["stop", "skip"], default=None,
                   help="What to do when inference fails for a frame")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    args = p.parse_args(argv)

    overrides = {
        "CAMERA_INDEX": args.camera,
        "MODEL_VARIANT": args.variant,
        "MODEL_PATH": args.model,
        "CONFIDENCE_THRESHOLD": args.threshold,
        "ON_DETECTION_ERROR": args.on_detection_error,
        "LOG_LEVEL": args.log_level,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv=None) -> int:
    settings = build_settings(argv)
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    token = CancellationToken()

    def stop_on_sigint():
        # Ctrl-C during setup stays a KeyboardInterrupt; once frames flow it stops the loop
        signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())

    try:
        state = run_live_overlay(settings, token=token, on_ready=stop_on_sigint)
    except KeyboardInterrupt:
        logger.info("[cli] interrupted during setup")
        return 130
    if state is None or state.stop_reason == "detection_error":
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
