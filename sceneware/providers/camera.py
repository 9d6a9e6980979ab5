"""
Frame Sources

Methods for exposing video frames to the narration engine:

- CameraFrameSource: live OpenCV capture (webcam index or stream URL)
- StaticFrameSource: a fixed frame, e.g. an image loaded from disk
"""

import logging
import time
from typing import Optional, Union

try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False
    cv2 = None

from ..exceptions import ConfigurationError
from ..models import Frame

logger = logging.getLogger(__name__)


def _require_cv2():
    if not HAS_CV2:
        raise ConfigurationError(
            "OpenCV not available. Install with: pip install sceneware[vision]"
        )


def frame_from_image(image, timestamp: Optional[float] = None) -> Frame:
    """Wrap a numpy image (H x W x C) as a Frame."""
    height, width = image.shape[:2]
    return Frame(
        image=image,
        width=int(width),
        height=int(height),
        timestamp=timestamp if timestamp is not None else time.time(),
    )


class CameraFrameSource:
    """
    Live camera frames over OpenCV.

    Args:
        device: Camera index or stream URL
        width: Requested capture width (0 = camera default)
        height: Requested capture height (0 = camera default)
    """

    def __init__(self, device: Union[int, str] = 0, width: int = 0, height: int = 0):
        self.device = device
        self.width = width
        self.height = height
        self.paused = False
        self._cap = None

    def open(self) -> bool:
        """Open the capture device. Returns True on success."""
        _require_cv2()

        if self._cap is not None:
            return True

        cap = cv2.VideoCapture(self.device)
        if not cap.isOpened():
            logger.error(f"Cannot open camera: {self.device}")
            cap.release()
            return False

        if self.width:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height:
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        self._cap = cap
        logger.info(f"📷 Camera opened: {self.device}")
        return True

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def current_frame(self) -> Optional[Frame]:
        """Grab the latest frame, or None when the camera is not ready."""
        if self._cap is None or self.paused:
            return None

        ok, image = self._cap.read()
        if not ok or image is None:
            logger.debug("Camera returned no frame")
            return None

        return frame_from_image(image)

    def release(self):
        """Release the capture device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info(f"📷 Camera released: {self.device}")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class StaticFrameSource:
    """Always returns the same frame (tests, one-shot descriptions)."""

    def __init__(self, frame: Optional[Frame] = None):
        self.frame = frame
        self.paused = False

    @classmethod
    def from_image(cls, path: str) -> "StaticFrameSource":
        """Load an image file with OpenCV."""
        _require_cv2()
        image = cv2.imread(str(path))
        if image is None:
            raise ConfigurationError(f"Cannot read image: {path}")
        return cls(frame_from_image(image))

    def current_frame(self) -> Optional[Frame]:
        if self.paused:
            return None
        return self.frame
