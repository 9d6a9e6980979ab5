"""
YOLO Detection Provider

Ultralytics YOLO wrapper implementing the DetectionProvider contract.
Inference runs in a worker thread so the event loop stays responsive, and
device failures are reported as BackendFaultError so the engine can move
the provider to its fallback device.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from ..exceptions import BackendFaultError
from ..models import BoundingBox, Detection, Frame

logger = logging.getLogger(__name__)


# =============================================================================
# YOLO AVAILABILITY
# =============================================================================

_YOLO_AVAILABLE = None


def is_yolo_available() -> bool:
    """Check if YOLO is available."""
    global _YOLO_AVAILABLE

    if _YOLO_AVAILABLE is None:
        try:
            from ultralytics import YOLO  # noqa: F401
            _YOLO_AVAILABLE = True
        except ImportError:
            _YOLO_AVAILABLE = False

    return _YOLO_AVAILABLE


# Device names matched as whole tokens ("mps" must not match "timestamps");
# underscores still separate them, as in CUBLAS_STATUS_ALLOC_FAILED.
BACKEND_DEVICE_PATTERN = re.compile(r"(?<![a-z])(cuda|cudnn|cublas|mps)(?![a-z])")

# Substrings of device errors raised by torch / ultralytics
BACKEND_FAULT_MARKERS = (
    "out of memory",
    "device-side",
    "no kernel image",
    "invalid device",
)


def is_backend_fault(exc: BaseException) -> bool:
    """Classify an inference error as a compute backend fault."""
    if isinstance(exc, BackendFaultError):
        return True
    if not isinstance(exc, (RuntimeError, AssertionError)):
        return False
    text = str(exc).lower()
    if BACKEND_DEVICE_PATTERN.search(text):
        return True
    return any(marker in text for marker in BACKEND_FAULT_MARKERS)


# =============================================================================
# YOLO DETECTOR
# =============================================================================

class YOLODetectionProvider:
    """YOLO object detection on a switchable device."""

    # COCO class names
    COCO_CLASSES = {
        0: "person", 1: "bicycle", 2: "car", 3: "motorcycle", 4: "airplane",
        5: "bus", 6: "train", 7: "truck", 8: "boat", 9: "traffic light",
        10: "fire hydrant", 11: "stop sign", 12: "parking meter", 13: "bench",
        14: "bird", 15: "cat", 16: "dog", 17: "horse", 18: "sheep", 19: "cow",
        20: "elephant", 21: "bear", 22: "zebra", 23: "giraffe", 24: "backpack",
        25: "umbrella", 26: "handbag", 27: "tie", 28: "suitcase", 29: "frisbee",
        30: "skis", 31: "snowboard", 32: "sports ball", 33: "kite", 34: "baseball bat",
        35: "baseball glove", 36: "skateboard", 37: "surfboard", 38: "tennis racket",
        39: "bottle", 40: "wine glass", 41: "cup", 42: "fork", 43: "knife",
        44: "spoon", 45: "bowl", 46: "banana", 47: "apple", 48: "sandwich",
        49: "orange", 50: "broccoli", 51: "carrot", 52: "hot dog", 53: "pizza",
        54: "donut", 55: "cake", 56: "chair", 57: "couch", 58: "potted plant",
        59: "bed", 60: "dining table", 61: "toilet", 62: "tv", 63: "laptop",
        64: "mouse", 65: "remote", 66: "keyboard", 67: "cell phone", 68: "microwave",
        69: "oven", 70: "toaster", 71: "sink", 72: "refrigerator", 73: "book",
        74: "clock", 75: "vase", 76: "scissors", 77: "teddy bear", 78: "hair drier",
        79: "toothbrush"
    }

    def __init__(
        self,
        model_path: str = "yolov8n.pt",
        backend: str = "cuda",
        fallback_backend: str = "cpu",
        confidence: float = 0.25,
        class_names: Optional[Dict[int, str]] = None,
    ):
        """
        Initialize YOLO detector.

        Args:
            model_path: Path to YOLO model or model name
            backend: Device used for inference (cuda, mps, cpu)
            fallback_backend: Device used after a backend fault
            confidence: Confidence passed to the model; the engine applies
                its own, usually higher, threshold afterwards
            class_names: Class id to label mapping used when the model does not
                carry its own names (default: COCO)
        """
        self.model_path = model_path
        self.backend = backend
        self.fallback_backend = fallback_backend
        self.confidence = confidence
        self.class_names = class_names or self.COCO_CLASSES
        self._model = None

    @property
    def model(self):
        """Lazy load YOLO model."""
        if self._model is None:
            if not is_yolo_available():
                raise RuntimeError("YOLO not available. Install with: pip install ultralytics")

            from ultralytics import YOLO
            logger.info(f"Loading YOLO model {self.model_path}")
            self._model = YOLO(self.model_path)

        return self._model

    @property
    def degraded(self) -> bool:
        return self.backend == self.fallback_backend

    def switch_backend(self):
        """Move inference to the fallback device. Idempotent."""
        if self.degraded:
            return
        logger.warning(f"Switching YOLO backend {self.backend} -> {self.fallback_backend}")
        self.backend = self.fallback_backend

    def is_backend_fault(self, exc: BaseException) -> bool:
        return is_backend_fault(exc)

    async def detect(self, frame: Frame) -> List[Detection]:
        """Detect objects in a frame on the current backend."""
        try:
            return await asyncio.to_thread(self._predict, frame.image)
        except BackendFaultError:
            raise
        except Exception as e:
            if is_backend_fault(e):
                raise BackendFaultError(str(e), backend=self.backend) from e
            raise

    def _predict(self, image: Any) -> List[Detection]:
        results = self.model(
            image,
            conf=self.confidence,
            device=self.backend,
            verbose=False,
        )

        detections = []
        for result in results:
            if result.boxes is None:
                continue

            names: Dict[int, str] = getattr(result, "names", None) or {}
            for box in result.boxes:
                x1, y1, x2, y2 = box.xyxy[0].tolist()
                cls_id = int(box.cls[0])

                detections.append(Detection(
                    class_label=self._class_name(cls_id, names),
                    confidence=float(box.conf[0]),
                    bounding_box=BoundingBox.from_corners(x1, y1, x2, y2),
                ))

        return detections

    def _class_name(self, cls_id: int, names: Optional[Dict[int, str]] = None) -> str:
        if names and cls_id in names:
            return names[cls_id]
        return self.class_names.get(cls_id, f"class_{cls_id}")
