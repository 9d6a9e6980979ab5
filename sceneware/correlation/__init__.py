"""
Correlation Module - Pairing person detections with recognized faces.

- geometry.py: spatial tests between person and face boxes
- strategies.py: ordered strategy chain (primary + fallbacks)
- correlator.py: per-cycle correlation and label resolution

Usage:
    from sceneware.correlation import PersonIdentityCorrelator, resolve_labels

    correlator = PersonIdentityCorrelator()
    results = correlator.correlate(detections, identities)
    labels = resolve_labels(detections, results)
"""

from .geometry import (
    SpatialMatch,
    measure,
)

from .strategies import (
    CorrelationContext,
    CorrelationStrategy,
    CentroidDistanceStrategy,
    UniquePairingStrategy,
    LargestToLargestStrategy,
    FirstAvailableStrategy,
    default_strategies,
)

from .correlator import (
    UNKNOWN_PERSON_LABEL,
    PersonIdentityCorrelator,
    resolve_labels,
)

__all__ = [
    # Geometry
    "SpatialMatch",
    "measure",
    # Strategies
    "CorrelationContext",
    "CorrelationStrategy",
    "CentroidDistanceStrategy",
    "UniquePairingStrategy",
    "LargestToLargestStrategy",
    "FirstAvailableStrategy",
    "default_strategies",
    # Correlator
    "UNKNOWN_PERSON_LABEL",
    "PersonIdentityCorrelator",
    "resolve_labels",
]
