"""
Request/response models exchanged between the UI and worker contexts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import OrchestratorError, error_for_kind
from .letterbox import LetterboxResult


@dataclass(frozen=True)
class InferenceRequest:
    """
    One inference call.

    The letterbox metadata travels with the tensor so a later postprocessing
    stage can invert detections; the worker does not use it.
    """
    tensor: np.ndarray
    dims: Tuple[int, ...]
    pad_left: Optional[int] = None
    pad_top: Optional[int] = None
    scale: Optional[float] = None

    @classmethod
    def from_letterbox(cls, result: LetterboxResult) -> "InferenceRequest":
        return cls(
            tensor=result.tensor,
            dims=tuple(result.dims),
            pad_left=result.pad_left,
            pad_top=result.pad_top,
            scale=result.scale,
        )


@dataclass(frozen=True)
class InferenceResponse:
    """
    Result summary of one inference call.

    Exactly one of the two shapes is populated: ``output_length`` and
    ``output_dims`` on success, ``error_kind`` and ``message`` on failure.
    """
    output_length: Optional[int] = None
    output_dims: Tuple[int, ...] = field(default_factory=tuple)
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, output_length: int, output_dims) -> "InferenceResponse":
        return cls(output_length=int(output_length), output_dims=tuple(int(d) for d in output_dims))

    @classmethod
    def failure(cls, error: OrchestratorError) -> "InferenceResponse":
        return cls(error_kind=error.kind, message=error.message)

    def raise_for_error(self) -> "InferenceResponse":
        """Raise the typed error carried by a failed response; return self otherwise."""
        if not self.ok:
            raise error_for_kind(self.error_kind, self.message or "")
        return self

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {
                "ok": True,
                "output_length": self.output_length,
                "output_dims": list(self.output_dims),
            }
        return {"ok": False, "error_kind": self.error_kind, "message": self.message}
