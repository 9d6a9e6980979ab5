"""
Correlation Strategies

Ordered chain used to pair a person detection with a recognized identity.
The first strategy that returns a result wins for that detection:

    CentroidDistanceStrategy   geometric scoring (primary)
    UniquePairingStrategy      one person, one identity
    LargestToLargestStrategy   biggest person gets the biggest face
    FirstAvailableStrategy     first identity in provider order

Fallbacks rely on population counts rather than geometry, which keeps
narration useful when face coordinates lag behind the detection frame.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models import CorrelationResult, Detection, RecognizedIdentity
from .geometry import measure

logger = logging.getLogger(__name__)

DEFAULT_MIN_PERSON_AREA = 50000.0


@dataclass(frozen=True)
class CorrelationContext:
    """Everything a strategy may look at during one cycle."""
    persons: Tuple[Tuple[int, Detection], ...]
    candidates: Tuple[RecognizedIdentity, ...]
    min_person_area: float = DEFAULT_MIN_PERSON_AREA

    @classmethod
    def build(
        cls,
        detections: Sequence[Detection],
        identities: Sequence[RecognizedIdentity],
        min_person_area: float = DEFAULT_MIN_PERSON_AREA,
    ) -> "CorrelationContext":
        persons = tuple((i, d) for i, d in enumerate(detections) if d.is_person)
        candidates = tuple(ident for ident in identities if ident.is_candidate)
        return cls(persons=persons, candidates=candidates, min_person_area=min_person_area)

    def largest_person_index(self) -> Optional[int]:
        """Index of the largest person detection, first one on ties."""
        best_index, best_area = None, -1.0
        for index, detection in self.persons:
            area = detection.bounding_box.area
            if area > best_area:
                best_index, best_area = index, area
        return best_index

    def largest_candidate(self) -> Optional[RecognizedIdentity]:
        """Identity with the largest face box, first one on ties."""
        best, best_area = None, -1.0
        for identity in self.candidates:
            area = identity.bounding_box.area
            if area > best_area:
                best, best_area = identity, area
        return best


class CorrelationStrategy(ABC):
    """One link of the correlation chain."""

    name: str = ""

    @abstractmethod
    def match(
        self,
        index: int,
        detection: Detection,
        context: CorrelationContext,
    ) -> Optional[CorrelationResult]:
        """Return a result for this person detection, or None to pass it on."""
        raise NotImplementedError

    def _result(self, detection: Detection, identity: RecognizedIdentity) -> CorrelationResult:
        return CorrelationResult(
            matched_identity=identity,
            score=detection.bounding_box.distance_to(identity.bounding_box),
            strategy=self.name,
        )


class CentroidDistanceStrategy(CorrelationStrategy):
    """Lowest discounted center distance among geometrically eligible faces."""

    name = "centroid"

    def match(self, index, detection, context):
        best: Optional[CorrelationResult] = None

        for identity in context.candidates:
            spatial = measure(detection.bounding_box, identity.bounding_box)
            logger.debug(
                f"person#{index} vs {identity.name}: d={spatial.distance:.1f} "
                f"in_box={spatial.face_in_person_box} overlap={spatial.boxes_overlap} "
                f"head={spatial.face_in_head_area} eligible={spatial.eligible}"
            )
            if not spatial.eligible:
                continue

            score = spatial.score
            # Strict comparison keeps the first-seen candidate on ties
            if best is None or score < best.score:
                best = CorrelationResult(
                    matched_identity=identity,
                    score=score,
                    strategy=self.name,
                )

        return best


class UniquePairingStrategy(CorrelationStrategy):
    """Exactly one person and one identity in the cycle: pair them."""

    name = "unique"

    def match(self, index, detection, context):
        if len(context.persons) == 1 and len(context.candidates) == 1:
            return self._result(detection, context.candidates[0])
        return None


class LargestToLargestStrategy(CorrelationStrategy):
    """Largest person detection takes the largest face, if big enough."""

    name = "largest"

    def match(self, index, detection, context):
        if index != context.largest_person_index():
            return None
        if detection.bounding_box.area <= context.min_person_area:
            return None

        identity = context.largest_candidate()
        if identity is None:
            return None
        return self._result(detection, identity)


class FirstAvailableStrategy(CorrelationStrategy):
    """Last resort: first identity in provider order."""

    name = "first"

    def match(self, index, detection, context):
        if not context.candidates:
            return None
        return self._result(detection, context.candidates[0])


def default_strategies() -> List[CorrelationStrategy]:
    """Primary strategy followed by the fallbacks, in evaluation order."""
    return [
        CentroidDistanceStrategy(),
        UniquePairingStrategy(),
        LargestToLargestStrategy(),
        FirstAvailableStrategy(),
    ]
