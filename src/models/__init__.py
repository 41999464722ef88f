"""
Typed models for the letterbox inference worker.

These models are shared by the UI-side and worker-side code; nothing in here
performs I/O except ImageData.from_file.
"""

from .image import ImageData
from .letterbox import LetterboxGeometry, LetterboxResult
from .messages import InferenceRequest, InferenceResponse
from .errors import (
    OrchestratorError,
    InvalidImageError,
    ModelInitError,
    ModelNotReadyError,
    ShapeMismatchError,
    OrchestratorUnavailableError,
    InferenceError,
    error_for_kind,
)
from .config import Config, ModelConfig, WorkerConfig, ClientConfig

__all__ = [
    # Image
    "ImageData",
    # Letterbox
    "LetterboxGeometry",
    "LetterboxResult",
    # Messages
    "InferenceRequest",
    "InferenceResponse",
    # Errors
    "OrchestratorError",
    "InvalidImageError",
    "ModelInitError",
    "ModelNotReadyError",
    "ShapeMismatchError",
    "OrchestratorUnavailableError",
    "InferenceError",
    "error_for_kind",
    # Config
    "Config",
    "ModelConfig",
    "WorkerConfig",
    "ClientConfig",
]
