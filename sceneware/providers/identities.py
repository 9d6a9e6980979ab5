"""
Identity Registry

Holds the latest faces reported by a face recognizer. The recognizer
usually runs on its own thread and calls ``update``; the narration engine
reads snapshots with ``current_identities``.
"""

import threading
import time
from typing import Iterable, Optional, Tuple

from ..models import RecognizedIdentity


class IdentityRegistry:
    """Thread-safe holder of the current identity snapshot."""

    def __init__(self, identities: Optional[Iterable[RecognizedIdentity]] = None):
        self._lock = threading.Lock()
        self._identities: Tuple[RecognizedIdentity, ...] = tuple(identities or ())
        self._updated_at = time.time() if identities else 0.0

    def update(self, identities: Iterable[RecognizedIdentity]):
        """Replace the snapshot with the recognizer's latest result."""
        snapshot = tuple(identities)
        with self._lock:
            self._identities = snapshot
            self._updated_at = time.time()

    def clear(self):
        self.update(())

    def current_identities(self) -> Tuple[RecognizedIdentity, ...]:
        with self._lock:
            return self._identities

    @property
    def updated_at(self) -> float:
        """Unix time of the last update (0 if never updated)."""
        with self._lock:
            return self._updated_at

    def __len__(self) -> int:
        return len(self.current_identities())
