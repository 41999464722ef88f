"""
Inference engine boundary and model session lifecycle.
"""

from .backend import ExecutionOptions, InferenceEngine, SessionHandle
from .session import (
    ModelSessionManager,
    SessionState,
    get_session_manager,
    reset_session_manager,
)
from .tensor import TransientTensor

__all__ = [
    "ExecutionOptions",
    "InferenceEngine",
    "SessionHandle",
    "ModelSessionManager",
    "SessionState",
    "get_session_manager",
    "reset_session_manager",
    "TransientTensor",
]
