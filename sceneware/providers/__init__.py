"""
Providers Module - Collaborators of the narration engine.

- base.py: FrameSource, DetectionProvider, IdentityProvider, NarrationSink
- camera.py: OpenCV camera and static frame sources
- yolo.py: Ultralytics YOLO detection provider
- identities.py: thread-safe identity snapshot holder

Usage:
    from sceneware.providers import CameraFrameSource, YOLODetectionProvider

    camera = CameraFrameSource(device=0)
    detector = YOLODetectionProvider("yolov8n.pt", backend="cuda")
"""

from .base import (
    FrameSource,
    DetectionProvider,
    IdentityProvider,
    NarrationSink,
)

from .camera import (
    CameraFrameSource,
    StaticFrameSource,
    frame_from_image,
)

from .identities import IdentityRegistry

from .yolo import (
    YOLODetectionProvider,
    is_yolo_available,
    is_backend_fault,
)

__all__ = [
    # Contracts
    "FrameSource",
    "DetectionProvider",
    "IdentityProvider",
    "NarrationSink",
    # Frames
    "CameraFrameSource",
    "StaticFrameSource",
    "frame_from_image",
    # Identities
    "IdentityRegistry",
    # Detection
    "YOLODetectionProvider",
    "is_yolo_available",
    "is_backend_fault",
]
