"""
Error taxonomy shared by the UI and worker sides.

Every error carries a stable ``kind`` string so it can cross the channel as a
response payload and be rebuilt on the other side.
"""

from __future__ import annotations

from typing import Dict, Optional, Type


class OrchestratorError(Exception):
    """Base class for all typed errors in this project."""

    kind = "OrchestratorError"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.kind


class InvalidImageError(OrchestratorError):
    """Input image is malformed or has a zero dimension."""

    kind = "InvalidImageError"


class ModelInitError(OrchestratorError):
    """The model failed to load."""

    kind = "ModelInitError"


class ModelNotReadyError(OrchestratorError):
    """Inference requested while no model session is ready."""

    kind = "ModelNotReadyError"


class ShapeMismatchError(OrchestratorError):
    """Request tensor length does not match its declared dimensions."""

    kind = "ShapeMismatchError"


class OrchestratorUnavailableError(OrchestratorError):
    """The worker endpoint went away before answering."""

    kind = "OrchestratorUnavailableError"


class InferenceError(OrchestratorError):
    """The forward pass itself failed."""

    kind = "InferenceError"


_ERRORS_BY_KIND: Dict[str, Type[OrchestratorError]] = {
    cls.kind: cls
    for cls in (
        InvalidImageError,
        ModelInitError,
        ModelNotReadyError,
        ShapeMismatchError,
        OrchestratorUnavailableError,
        InferenceError,
    )
}


def error_for_kind(kind: Optional[str], message: str = "") -> OrchestratorError:
    """Rebuild a typed error from its wire ``kind``; unknown kinds map to the base class."""
    cls = _ERRORS_BY_KIND.get(kind or "", OrchestratorError)
    return cls(message)
