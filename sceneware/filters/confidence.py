"""
Confidence Filter

Drops weak detections and keeps the most confident few for narration.
"""

from typing import Iterable, List

from ..models import Detection

DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_MAX_OBJECTS = 5


def filter_detections(
    detections: Iterable[Detection],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    max_objects: int = DEFAULT_MAX_OBJECTS,
) -> List[Detection]:
    """
    Keep confident detections, most confident first.

    Args:
        detections: Detections from one cycle
        min_confidence: Minimum confidence (inclusive)
        max_objects: Maximum number of detections returned

    Returns:
        Detections with ``confidence >= min_confidence`` sorted by descending
        confidence (ties keep their input order), truncated to ``max_objects``
    """
    kept = [d for d in detections if d.confidence >= min_confidence]
    # sorted() is stable, equal confidences keep input order
    kept = sorted(kept, key=lambda d: d.confidence, reverse=True)
    return kept[:max(0, max_objects)]
