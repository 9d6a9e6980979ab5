"""
Sceneware - Real-time scene narration for blind and low-vision users

Detects objects in camera frames, names the people it recognizes, and
speaks one short sentence per detection cycle.

Uses lazy imports so the CLI starts without loading OpenCV or YOLO.
"""

__version__ = "0.1.0"
__author__ = "Sceneware Team"
__license__ = "Apache-2.0"


def __getattr__(name):
    """Lazy import handler - imports modules only when accessed."""

    # Engine
    if name in ("SceneNarrator", "SceneAnalysis"):
        from . import engine
        return getattr(engine, name)

    # Pipeline stages
    if name == "filter_detections":
        from .filters import filter_detections
        return filter_detections
    if name in ("PersonIdentityCorrelator", "resolve_labels"):
        from . import correlation
        return getattr(correlation, name)
    if name == "generate_description":
        from .description import generate_description
        return generate_description
    if name == "NarrationDispatcher":
        from .narration import NarrationDispatcher
        return NarrationDispatcher

    # Models
    if name in ("BoundingBox", "Detection", "RecognizedIdentity", "CorrelationResult",
                "Frame", "LoopState", "NarrationEntry", "NarratorStats"):
        from . import models
        return getattr(models, name)

    # Configuration
    if name in ("EngineSettings", "UtteranceSettings"):
        from . import config as config_module
        return getattr(config_module, name)

    # Diagnostics
    if name in ("enable_diagnostics", "print_stats"):
        from . import diagnostics
        return getattr(diagnostics, name)

    # Exceptions
    if name in ("SceneWareError", "ConfigurationError", "DetectionError",
                "BackendFaultError", "NarrationError", "SceneFileError"):
        from . import exceptions
        return getattr(exceptions, name)

    # Scene files
    if name in ("Scene", "load_scene", "dump_entries"):
        from . import scene_file
        return getattr(scene_file, name)

    raise AttributeError(f"module 'sceneware' has no attribute '{name}'")


__all__ = [
    # Engine
    "SceneNarrator",
    "SceneAnalysis",

    # Pipeline stages
    "filter_detections",
    "PersonIdentityCorrelator",
    "resolve_labels",
    "generate_description",
    "NarrationDispatcher",

    # Models
    "BoundingBox",
    "Detection",
    "RecognizedIdentity",
    "CorrelationResult",
    "Frame",
    "LoopState",
    "NarrationEntry",
    "NarratorStats",

    # Configuration
    "EngineSettings",
    "UtteranceSettings",

    # Diagnostics
    "enable_diagnostics",
    "print_stats",

    # Exceptions
    "SceneWareError",
    "ConfigurationError",
    "DetectionError",
    "BackendFaultError",
    "NarrationError",
    "SceneFileError",

    # Scene files
    "Scene",
    "load_scene",
    "dump_entries",
]
