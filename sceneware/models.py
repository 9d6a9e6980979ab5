"""
Narration Data Models

Data classes and enums shared by the narration engine: boxes, detections,
recognized identities, correlation results, frames, loop state and the
per-session bookkeeping (history entries and statistics).

All boxes are in source-image pixel coordinates with a top-left origin and
are represented as ``(x, y, width, height)``.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

PERSON_LABEL = "person"
UNKNOWN_NAME = "Unknown"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in pixel space."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        """Get center point."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: Tuple[float, float]) -> bool:
        """Check if point lies within the rectangle (edges included)."""
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def overlaps(self, other: "BoundingBox") -> bool:
        """Standard AABB intersection test; touching edges do not overlap."""
        return (
            self.x < other.right
            and self.right > other.x
            and self.y < other.bottom
            and self.bottom > other.y
        )

    def distance_to(self, other: "BoundingBox") -> float:
        """Euclidean distance between the two centers."""
        (ax, ay), (bx, by) = self.center, other.center
        return math.hypot(ax - bx, ay - by)

    @classmethod
    def from_list(cls, values: List[float]) -> "BoundingBox":
        """Create box from ``[x, y, width, height]``."""
        x, y, w, h = (float(v) for v in values)
        return cls(x=x, y=y, width=w, height=h)

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create box from ``x1, y1, x2, y2`` corner coordinates."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def to_list(self) -> List[float]:
        return [self.x, self.y, self.width, self.height]


@dataclass(frozen=True)
class Detection:
    """Single object detection."""
    class_label: str
    confidence: float
    bounding_box: BoundingBox

    @property
    def is_person(self) -> bool:
        return self.class_label == PERSON_LABEL

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "label": self.class_label,
            "confidence": self.confidence,
            "box": self.bounding_box.to_list(),
        }


@dataclass(frozen=True)
class RecognizedIdentity:
    """Named face currently visible to the identity provider."""
    name: str
    is_self: bool = False
    bounding_box: Optional[BoundingBox] = None

    @property
    def is_candidate(self) -> bool:
        """Usable for correlation: identified and located."""
        return self.name != UNKNOWN_NAME and self.bounding_box is not None

    @property
    def label(self) -> str:
        """Label used when narrating this identity."""
        return "you" if self.is_self else self.name


@dataclass(frozen=True)
class CorrelationResult:
    """Outcome of matching one person detection to zero or one identity."""
    matched_identity: Optional[RecognizedIdentity] = None
    score: float = 0.0
    strategy: str = ""

    @property
    def matched(self) -> bool:
        return self.matched_identity is not None


@dataclass
class Frame:
    """Image buffer handed to the detection provider."""
    image: Any
    width: int = 0
    height: int = 0
    timestamp: float = 0.0

    @property
    def is_ready(self) -> bool:
        return self.width > 0 and self.height > 0

    def __str__(self) -> str:
        return f"Frame {self.width}x{self.height} @ {self.timestamp:.2f}s"


class LoopState(Enum):
    """Scheduler lifecycle state."""
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class NarrationEntry:
    """Single narration history entry."""
    timestamp: datetime
    cycle: int
    description: str
    labels: List[str] = field(default_factory=list)
    detection_count: int = 0
    backend: str = ""
    spoken: bool = False

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "cycle": self.cycle,
            "description": self.description,
            "labels": list(self.labels),
            "detections": self.detection_count,
            "backend": self.backend,
            "spoken": self.spoken,
        }


@dataclass
class NarratorStats:
    """Statistics for a narration session."""
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    cycles: int = 0
    cycles_skipped: int = 0
    detections: int = 0
    descriptions: int = 0
    narrations: int = 0
    backend_faults: int = 0
    detection_errors: int = 0

    total_cycle_time: float = 0.0

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        duration = (self.end_time or datetime.now()) - self.start_time
        return {
            "duration_seconds": duration.total_seconds(),
            "cycles": self.cycles,
            "cycles_skipped": self.cycles_skipped,
            "detections": self.detections,
            "descriptions": self.descriptions,
            "narrations": self.narrations,
            "backend_faults": self.backend_faults,
            "detection_errors": self.detection_errors,
            "avg_cycle_ms": (
                self.total_cycle_time / self.cycles * 1000
                if self.cycles > 0 else 0
            ),
        }
