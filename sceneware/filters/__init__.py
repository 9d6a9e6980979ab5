"""
Filters Module - Detection filtering before correlation.

Usage:
    from sceneware.filters import filter_detections
"""

from .confidence import (
    DEFAULT_MAX_OBJECTS,
    DEFAULT_MIN_CONFIDENCE,
    filter_detections,
)

__all__ = [
    "DEFAULT_MAX_OBJECTS",
    "DEFAULT_MIN_CONFIDENCE",
    "filter_detections",
]
