"""
Scene Narration Engine

Cooperative detection loop that narrates what the camera sees:

    ┌──────────┐   ┌──────────┐   ┌────────┐   ┌────────────┐   ┌──────────┐   ┌──────────┐
    │  Frame   │ → │ Detector │ → │ Filter │ → │ Correlator │ → │ Describer│ → │ Narrator │
    └──────────┘   └──────────┘   └────────┘   └────────────┘   └──────────┘   └──────────┘
                                                     ↑
                                               Identities

One cycle runs at a time. The next cycle is scheduled only after the
current one (detection included) has finished, so a slow detector delays
narration instead of piling up work. Detector failures never leave the
loop: a backend fault moves the detector to its fallback backend and
retries once, any other failure yields an empty cycle.

Usage:
    from sceneware.engine import SceneNarrator

    narrator = SceneNarrator(
        detection_provider=YOLODetectionProvider(),
        identity_provider=IdentityRegistry(),
        narration_sink=TTSNarrationSink(),
    )
    narrator.attach_frame_source(CameraFrameSource(0))
    narrator.configure(detection_interval_ms=3000)
    await narrator.run(duration=60)
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional, Sequence

from .config import EngineSettings, UtteranceSettings
from .correlation import PersonIdentityCorrelator, resolve_labels
from .description import generate_description
from .exceptions import BackendFaultError, ConfigurationError
from .filters import filter_detections
from .models import (
    Detection,
    Frame,
    LoopState,
    NarrationEntry,
    NarratorStats,
    RecognizedIdentity,
)
from .narration import NarrationDispatcher
from .providers.base import DetectionProvider, FrameSource, IdentityProvider, NarrationSink

logger = logging.getLogger(__name__)


@dataclass
class SceneAnalysis:
    """Outcome of filtering, correlating and describing one cycle."""
    detections: List[Detection] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    description: Optional[str] = None


class SceneNarrator:
    """
    Real-time scene narration engine.

    Lifecycle: ``configure`` -> ``start`` -> ``stop``. ``start`` and ``stop``
    must be called from the thread running the asyncio event loop.

    Args:
        detection_provider: Object detector with a switchable backend
        identity_provider: Source of recognized faces (optional)
        narration_sink: Speech output (optional; descriptions are still
            generated and recorded without it)
        frame_source: Video frame source (can be attached later)
        settings: Loop settings (default: built-in defaults)
        utterance: Speech parameters for every narration
        correlator: Person/identity correlator (default strategy chain)
        on_description: Called with every produced description
    """

    def __init__(
        self,
        detection_provider: Optional[DetectionProvider] = None,
        identity_provider: Optional[IdentityProvider] = None,
        narration_sink: Optional[NarrationSink] = None,
        frame_source: Optional[FrameSource] = None,
        settings: Optional[EngineSettings] = None,
        utterance: Optional[UtteranceSettings] = None,
        correlator: Optional[PersonIdentityCorrelator] = None,
        on_description: Optional[Callable[[str], None]] = None,
    ):
        self.detection_provider = detection_provider
        self.identity_provider = identity_provider
        self.frame_source = frame_source
        self.settings = settings or EngineSettings()
        self.correlator = correlator or PersonIdentityCorrelator(
            min_person_area=self.settings.min_person_area,
        )
        self.on_description = on_description

        self.dispatcher = NarrationDispatcher(
            sink=narration_sink,
            settings=utterance,
            debounce=self.settings.debounce_seconds,
            should_speak=self._may_speak,
        )

        self._state = LoopState.IDLE
        self._task: Optional[asyncio.Task] = None
        # _one_shot lets run_cycle() speak while idle and is revoked by stop();
        # _one_shot_running only tracks whether run_cycle() is still awaiting.
        self._one_shot = False
        self._one_shot_running = False
        self._active_cycle: Optional[object] = None
        self._backend_degraded = False
        self._history: Deque[NarrationEntry] = deque(maxlen=self.settings.history_size)
        self.stats = NarratorStats()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def configure(
        self,
        detection_interval_ms: Optional[int] = None,
        min_confidence: Optional[float] = None,
        max_objects: Optional[int] = None,
        **extra,
    ) -> EngineSettings:
        """
        Update loop settings; takes effect from the next cycle.

        Besides the three main settings, ``min_person_area``,
        ``narration_debounce_ms`` and ``history_size`` are accepted.

        Raises:
            ConfigurationError: on unknown keys or out-of-range values
        """
        settings = self.settings.merged(
            detection_interval_ms=detection_interval_ms,
            min_confidence=min_confidence,
            max_objects=max_objects,
            **extra,
        )

        self.settings = settings
        self.correlator.min_person_area = settings.min_person_area
        self.dispatcher.debounce = settings.debounce_seconds
        if self._history.maxlen != settings.history_size:
            self._history = deque(self._history, maxlen=settings.history_size)

        logger.debug(f"Engine configured: {settings.model_dump()}")
        return settings

    def attach_frame_source(self, source: FrameSource):
        self.frame_source = source

    def attach_detection_provider(self, provider: DetectionProvider):
        self.detection_provider = provider

    def attach_identity_provider(self, provider: IdentityProvider):
        self.identity_provider = provider

    def attach_narration_sink(self, sink: Optional[NarrationSink]):
        self.dispatcher.sink = sink

    def set_speech_rate(self, rate: float):
        """Change the speech rate used for future narrations."""
        self.dispatcher.settings = self.dispatcher.settings.with_rate(rate)
        logger.info(f"Speech rate set to {rate}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def state(self) -> LoopState:
        return self._state

    def is_running(self) -> bool:
        return self._state is LoopState.RUNNING

    @property
    def backend_degraded(self) -> bool:
        """True once the detector was moved to its fallback backend."""
        return self._backend_degraded

    @property
    def history(self) -> List[NarrationEntry]:
        return list(self._history)

    @property
    def last_description(self) -> Optional[str]:
        return self._history[-1].description if self._history else None

    def _missing_collaborator(self) -> Optional[str]:
        if self.frame_source is None:
            return "no frame source attached"
        if self.detection_provider is None:
            return "no detection provider attached"
        return None

    def start(self):
        """
        Start the detection loop on the running event loop.

        No-op when already running. When a collaborator is missing or no
        event loop is running, logs an error and stays idle.
        """
        if self._state is LoopState.RUNNING:
            return

        problem = self._missing_collaborator()
        if problem:
            logger.error(f"Cannot start narrator: {problem}")
            return
        if self._one_shot_running:
            logger.error("Cannot start narrator: a one-shot cycle is in progress")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("Cannot start narrator: no running event loop")
            return

        self._state = LoopState.RUNNING
        self.stats = NarratorStats()
        self._task = loop.create_task(self._run_loop())
        self._task.add_done_callback(self._on_task_done)

        logger.info(
            f"🎬 Scene narration started "
            f"(interval={self.settings.detection_interval_ms}ms, "
            f"min_confidence={self.settings.min_confidence}, "
            f"max_objects={self.settings.max_objects})"
        )

    def stop(self):
        """
        Stop the loop. Safe to call at any time, repeatedly, and from inside
        a narration callback; never raises.
        """
        was_running = self._state is LoopState.RUNNING
        self._state = LoopState.IDLE
        self._one_shot = False

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

        self.dispatcher.cancel()

        if was_running:
            self.stats.end_time = datetime.now()
            logger.info("⏹️ Scene narration stopped")

    async def run(self, duration: Optional[float] = None) -> NarratorStats:
        """Start the loop and wait until ``stop`` or ``duration`` seconds."""
        self.start()
        task = self._task
        if task is None:
            return self.stats

        try:
            await asyncio.wait({task}, timeout=duration)
        finally:
            self.stop()
        return self.stats

    async def run_cycle(self) -> Optional[str]:
        """
        Run one detection cycle now, outside the loop.

        Raises:
            ConfigurationError: when the loop is running, another cycle is in
                progress, or a collaborator is missing
        """
        if self._state is LoopState.RUNNING or self._active_cycle is not None:
            raise ConfigurationError("run_cycle() cannot overlap a running detection loop")
        if self._one_shot_running:
            raise ConfigurationError("run_cycle() is already in progress")

        problem = self._missing_collaborator()
        if problem:
            raise ConfigurationError(f"Cannot run cycle: {problem}")

        self._one_shot = True
        self._one_shot_running = True
        try:
            return await self._cycle()
        finally:
            self._one_shot = False
            self._one_shot_running = False

    def _may_speak(self) -> bool:
        return self._state is LoopState.RUNNING or self._one_shot

    def _on_task_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Detection loop crashed: {exc!r}")
        if self._task is task:
            self._task = None
            self._state = LoopState.IDLE

    # =========================================================================
    # DETECTION LOOP
    # =========================================================================

    async def _run_loop(self):
        while self._state is LoopState.RUNNING:
            try:
                await self._cycle()
            except Exception as e:
                logger.exception(f"Detection cycle failed: {e}")

            if self._state is not LoopState.RUNNING:
                break
            await asyncio.sleep(self.settings.interval_seconds)

    def _ready_frame(self) -> Optional[Frame]:
        source = self.frame_source
        if source is None or getattr(source, "paused", False):
            return None
        frame = source.current_frame()
        if frame is None or not frame.is_ready:
            return None
        return frame

    async def _cycle(self) -> Optional[str]:
        frame = self._ready_frame()
        if frame is None:
            self.stats.cycles_skipped += 1
            logger.debug("Frame not ready, skipping cycle")
            return None

        # A cancelled cycle can still be unwinding after a restart; it only
        # releases the marker it set itself.
        token = object()
        self._active_cycle = token
        started = time.monotonic()
        try:
            self.stats.cycles += 1
            detections = await self._detect(frame)
            self.stats.detections += len(detections)

            analysis = self.analyze(detections, self._identities())
            if analysis.description is None:
                logger.debug(f"Cycle {self.stats.cycles}: nothing to narrate")
                return None

            self.stats.descriptions += 1
            spoken = await self.dispatcher.dispatch(analysis.description)
            if spoken:
                self.stats.narrations += 1
            self._record(analysis, spoken)
            self._notify(analysis.description)
            return analysis.description
        finally:
            if self._active_cycle is token:
                self._active_cycle = None
            self.stats.total_cycle_time += time.monotonic() - started

    async def _detect(self, frame: Frame) -> List[Detection]:
        provider = self.detection_provider
        try:
            return list(await provider.detect(frame))
        except Exception as e:
            if not self._is_backend_fault(e):
                self.stats.detection_errors += 1
                logger.warning(f"Detection failed: {e}")
                return []
            self.stats.backend_faults += 1
            fault = e

        backend = getattr(provider, "backend", "?")
        if self._backend_degraded:
            logger.warning(f"Backend fault on fallback backend {backend}: {fault}")
            return []

        logger.warning(f"Backend fault on {backend}: {fault}; switching to fallback backend")
        self._backend_degraded = True
        try:
            provider.switch_backend()
        except Exception as e:
            logger.error(f"Cannot switch detection backend: {e}")
            return []

        try:
            detections = list(await provider.detect(frame))
        except Exception as e:
            self.stats.detection_errors += 1
            logger.warning(f"Detection retry on {getattr(provider, 'backend', '?')} failed: {e}")
            return []

        logger.info(f"Detection recovered on backend {getattr(provider, 'backend', '?')}")
        return detections

    def _is_backend_fault(self, exc: Exception) -> bool:
        if isinstance(exc, BackendFaultError):
            return True
        classify = getattr(self.detection_provider, "is_backend_fault", None)
        if callable(classify):
            try:
                return bool(classify(exc))
            except Exception:
                logger.debug("Backend fault classifier failed", exc_info=True)
        return False

    def _identities(self) -> Sequence[RecognizedIdentity]:
        if self.identity_provider is None:
            return ()
        try:
            return tuple(self.identity_provider.current_identities())
        except Exception as e:
            logger.warning(f"Identity provider failed: {e}")
            return ()

    # =========================================================================
    # SCENE ANALYSIS
    # =========================================================================

    def analyze(
        self,
        detections: Sequence[Detection],
        identities: Sequence[RecognizedIdentity],
    ) -> SceneAnalysis:
        """Filter, correlate and describe one set of detections."""
        filtered = filter_detections(
            detections,
            min_confidence=self.settings.min_confidence,
            max_objects=self.settings.max_objects,
        )
        correlations = self.correlator.correlate(filtered, identities)
        labels = resolve_labels(filtered, correlations)
        return SceneAnalysis(
            detections=filtered,
            labels=labels,
            description=generate_description(labels),
        )

    def describe(
        self,
        detections: Sequence[Detection],
        identities: Sequence[RecognizedIdentity] = (),
    ) -> Optional[str]:
        """Sentence for a set of detections, or None when nothing qualifies."""
        return self.analyze(detections, identities).description

    def _record(self, analysis: SceneAnalysis, spoken: bool):
        self._history.append(NarrationEntry(
            timestamp=datetime.now(),
            cycle=self.stats.cycles,
            description=analysis.description,
            labels=analysis.labels,
            detection_count=len(analysis.detections),
            backend=str(getattr(self.detection_provider, "backend", "")),
            spoken=spoken,
        ))

    def _notify(self, description: str):
        if self.on_description is None:
            return
        try:
            self.on_description(description)
        except Exception as e:
            logger.warning(f"on_description callback failed: {e}")
