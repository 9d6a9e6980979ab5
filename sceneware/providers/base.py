"""
Collaborator Interfaces

Contracts the narration engine consumes. Hosts plug in their own camera,
detector, face recognizer and speech output by implementing these; the
modules next to this one provide ready-made implementations.
"""

from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence, runtime_checkable

from ..models import Detection, Frame, RecognizedIdentity

if TYPE_CHECKING:
    from ..config import UtteranceSettings


@runtime_checkable
class FrameSource(Protocol):
    """Exposes the current video frame, read-only."""

    paused: bool

    def current_frame(self) -> Optional[Frame]:
        """Current frame, or None when no frame is ready."""
        ...


@runtime_checkable
class DetectionProvider(Protocol):
    """Object detector with a switchable compute backend."""

    backend: str

    async def detect(self, frame: Frame) -> List[Detection]:
        """Detect objects in ``frame``.

        Raises BackendFaultError when the compute backend is unusable; any
        other exception is treated as a transient failure.
        """
        ...

    def switch_backend(self) -> None:
        """Move to the fallback compute backend."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Snapshot of currently recognized faces."""

    def current_identities(self) -> Sequence[RecognizedIdentity]:
        ...


@runtime_checkable
class NarrationSink(Protocol):
    """Audio output for descriptions. Fire-and-forget."""

    def cancel(self) -> None:
        ...

    def speak(self, text: str, settings: "UtteranceSettings") -> None:
        ...
