"""
Custom exceptions for Sceneware
"""

__all__ = [
    "SceneWareError",
    "ConfigurationError",
    "DetectionError",
    "BackendFaultError",
    "NarrationError",
    "SceneFileError",
]


class SceneWareError(Exception):
    """Base exception for all Sceneware errors"""
    pass


class ConfigurationError(SceneWareError):
    """Invalid engine or collaborator configuration"""
    pass


class DetectionError(SceneWareError):
    """Detection provider failed on a frame"""
    pass


class BackendFaultError(DetectionError):
    """Compute backend of the detection provider is unavailable or crashed"""

    def __init__(self, message: str, backend: str = ""):
        super().__init__(message)
        self.backend = backend


class NarrationError(SceneWareError):
    """Narration sink could not speak or cancel"""
    pass


class SceneFileError(SceneWareError):
    """Malformed scene file"""
    pass
