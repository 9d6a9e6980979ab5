"""
Pytest configuration for Sceneware tests.

Provides fake engine collaborators and ensures that tests don't modify
the .env file.
"""

import asyncio
import logging
from typing import List, Optional

import pytest
from unittest.mock import patch

from sceneware.exceptions import BackendFaultError
from sceneware.models import BoundingBox, Detection, Frame, RecognizedIdentity


@pytest.fixture(autouse=True)
def mock_config_save():
    """Prevent tests from modifying .env file."""
    with patch('sceneware.config.config.save'):
        yield


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo enable_diagnostics() so caplog keeps receiving records."""
    logger = logging.getLogger("sceneware")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


# =============================================================================
# BUILDERS
# =============================================================================

def det(label: str, confidence: float = 0.9, box=(0, 0, 100, 100)) -> Detection:
    return Detection(label, confidence, BoundingBox(*box))


def ident(name: str, box=None, is_self: bool = False) -> RecognizedIdentity:
    return RecognizedIdentity(
        name=name,
        is_self=is_self,
        bounding_box=BoundingBox(*box) if box is not None else None,
    )


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

class FakeFrameSource:
    """Frame source returning a ready 640x480 frame unless told otherwise."""

    def __init__(self, ready: bool = True):
        self.paused = False
        self.ready = ready
        self.calls = 0

    def current_frame(self) -> Optional[Frame]:
        self.calls += 1
        if not self.ready:
            return Frame(image=None, width=0, height=0)
        return Frame(image=object(), width=640, height=480, timestamp=float(self.calls))


class FakeDetectionProvider:
    """
    Async detector returning fixed detections.

    ``fail_on`` lists backends that raise a BackendFaultError; ``error``
    is raised on every call when set.
    """

    def __init__(self, detections: Optional[List[Detection]] = None, backend: str = "cuda",
                 fallback_backend: str = "cpu", fail_on=(), error: Optional[Exception] = None,
                 delay: float = 0.0):
        self.detections = list(detections or [])
        self.backend = backend
        self.fallback_backend = fallback_backend
        self.fail_on = set(fail_on)
        self.error = error
        self.delay = delay
        self.calls: List[str] = []
        self.switches = 0
        self.active = 0
        self.max_active = 0

    async def detect(self, frame: Frame) -> List[Detection]:
        self.calls.append(self.backend)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.backend in self.fail_on:
                raise BackendFaultError(f"{self.backend} crashed", backend=self.backend)
            if self.error is not None:
                raise self.error
            return list(self.detections)
        finally:
            self.active -= 1

    def switch_backend(self):
        self.switches += 1
        self.backend = self.fallback_backend


class FakeIdentityProvider:
    def __init__(self, identities=()):
        self.identities = tuple(identities)

    def current_identities(self):
        return self.identities


class FakeSink:
    """Narration sink recording speak/cancel calls in order."""

    def __init__(self, fail: bool = False):
        self.spoken: List[str] = []
        self.events: List[str] = []
        self.settings = []
        self.fail = fail

    def speak(self, text, settings):
        self.events.append(f"speak:{text}")
        if self.fail:
            raise RuntimeError("audio device busy")
        self.spoken.append(text)
        self.settings.append(settings)

    def cancel(self):
        self.events.append("cancel")


@pytest.fixture
def frame_source():
    return FakeFrameSource()


@pytest.fixture
def sink():
    return FakeSink()
