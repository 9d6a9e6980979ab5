"""
Person-Identity Correlator

Runs the strategy chain for every person detection of a cycle and turns
the outcome into narration labels.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..models import CorrelationResult, Detection, RecognizedIdentity
from .strategies import (
    DEFAULT_MIN_PERSON_AREA,
    CorrelationContext,
    CorrelationStrategy,
    default_strategies,
)

logger = logging.getLogger(__name__)

UNKNOWN_PERSON_LABEL = "unknown person"


class PersonIdentityCorrelator:
    """
    Match person detections to recognized identities.

    Each person detection gets at most one identity per call; the same
    identity may be assigned to several detections. The result depends only
    on the arguments of the call, so repeated calls with the same inputs
    give the same mapping.

    Args:
        strategies: Ordered strategy chain (default: centroid, unique,
            largest, first). Prepend or append strategies to change policy,
            e.g. a strategy that keeps assignments stable across cycles.
        min_person_area: Pixel area a person box must exceed for the
            largest-to-largest fallback
    """

    def __init__(
        self,
        strategies: Optional[Sequence[CorrelationStrategy]] = None,
        min_person_area: float = DEFAULT_MIN_PERSON_AREA,
    ):
        self.strategies: List[CorrelationStrategy] = (
            list(strategies) if strategies is not None else default_strategies()
        )
        self.min_person_area = min_person_area

    def correlate(
        self,
        detections: Sequence[Detection],
        identities: Sequence[RecognizedIdentity],
    ) -> Dict[int, CorrelationResult]:
        """
        Correlate one cycle.

        Args:
            detections: Filtered detections of the cycle
            identities: Identity snapshot of the cycle

        Returns:
            Mapping from position in ``detections`` of every person detection
            to its CorrelationResult (``matched_identity`` is None when no
            strategy matched)
        """
        context = CorrelationContext.build(detections, identities, self.min_person_area)
        results: Dict[int, CorrelationResult] = {}

        for index, detection in context.persons:
            result = None
            if context.candidates:
                result = self._run_chain(index, detection, context)
            results[index] = result or CorrelationResult()

            if result is not None:
                logger.debug(
                    f"person#{index} -> {result.matched_identity.name} "
                    f"via {result.strategy} (score={result.score:.1f})"
                )

        return results

    def _run_chain(
        self,
        index: int,
        detection: Detection,
        context: CorrelationContext,
    ) -> Optional[CorrelationResult]:
        for strategy in self.strategies:
            result = strategy.match(index, detection, context)
            if result is not None:
                return result
        return None


def resolve_labels(
    detections: Sequence[Detection],
    correlations: Dict[int, CorrelationResult],
) -> List[str]:
    """
    Narration label for each detection, in order.

    Person detections become the matched identity's name, ``"you"`` for the
    operating user, or ``"unknown person"``; other detections keep their
    class label.
    """
    labels = []
    for index, detection in enumerate(detections):
        if not detection.is_person:
            labels.append(detection.class_label)
            continue

        result = correlations.get(index)
        if result is not None and result.matched:
            labels.append(result.matched_identity.label)
        else:
            labels.append(UNKNOWN_PERSON_LABEL)
    return labels
