"""
Ultralytics YOLO wrapper (lazy-loaded, once per process).
"""
from __future__ import annotations
import logging
from typing import List

import numpy as np

from core.config import Settings
from core.errors import DetectionError, ModelLoadError
from core.models import Box, Detection

logger = logging.getLogger(__name__)

# COCO-pretrained weights; "lite" is the small/fast variant
MODEL_WEIGHTS = {
    "lite": "yolov8n.pt",
    "full": "yolov8s.pt",
}

# Ultralytics drops boxes below its own conf (0.25 by default); the overlay filters again
DEFAULT_MODEL_CONF = 0.25

_model = None


class DetectionModel:
    """Loaded YOLO network that returns Detections in frame pixel coordinates."""

    def __init__(self, net, weights: str, device: str = "cpu", min_conf: float = DEFAULT_MODEL_CONF):
        self.net = net
        self.weights = weights
        self.device = device
        self.min_conf = float(min_conf)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        try:
            results = self.net(frame, verbose=False, device=self.device, conf=self.min_conf)
            detections = _to_detections(results)
        except Exception as e:
            raise DetectionError(f"Inference failed: {e}") from e
        logger.debug(f"[detector] {len(detections)} detections")
        return detections


def _to_detections(results) -> List[Detection]:
    """Flatten Ultralytics results (xyxy boxes) into Detections (x, y, w, h)."""
    out: List[Detection] = []
    for r in results:
        names = r.names
        boxes = r.boxes
        if boxes is None:
            continue
        for (x1, y1, x2, y2), conf, cls in zip(boxes.xyxy.tolist(), boxes.conf.tolist(), boxes.cls.tolist()):
            out.append(Detection(
                category=str(names[int(cls)]),
                confidence=min(1.0, max(0.0, float(conf))),
                box=Box(x=float(x1), y=float(y1), width=float(x2 - x1), height=float(y2 - y1)),
            ))
    return out


def load_model(settings: Settings) -> DetectionModel:
    """
    Load the detection model once; later calls return the same handle.

    Raises:
        ModelLoadError: ultralytics is missing, or the weights could not be
            fetched or initialized.
    """
    global _model
    weights = settings.MODEL_PATH or MODEL_WEIGHTS[settings.MODEL_VARIANT]
    if _model is not None:
        if _model.weights != weights:
            logger.warning(f"[detector] model already loaded ({_model.weights}); ignoring request for {weights}")
        return _model

    logger.info(f"[detector] loading {weights} on {settings.DEVICE}...")
    try:
        # Lazy import so torch is only pulled in when the loop is about to start
        from ultralytics import YOLO
        net = YOLO(weights)
    except Exception as e:
        raise ModelLoadError(f"Could not load detection model {weights}: {e}") from e

    _model = DetectionModel(
        net,
        weights=weights,
        device=settings.DEVICE,
        min_conf=min(DEFAULT_MODEL_CONF, settings.CONFIDENCE_THRESHOLD),
    )
    logger.info("[detector] model loaded.")
    return _model
