"""
Wire protocol between the UI context and the worker context.

One request message, one response message. The tensor travels as base64 of
little-endian float32 samples; decoding always produces a fresh array, so the
receiving side never shares a buffer with the sender.
"""

from __future__ import annotations

import base64
import binascii
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field, ValidationError

from models.errors import ShapeMismatchError
from models.messages import InferenceRequest, InferenceResponse

MESSAGE_TYPE = "PROCESS_IMAGE"
_WIRE_DTYPE = np.dtype("<f4")


class InferenceRequestMessage(BaseModel):
    type: str = Field(MESSAGE_TYPE, description="Message discriminator")
    tensor_data: str = Field(..., description="base64 of little-endian float32 samples")
    dims: List[int] = Field(..., description="Tensor shape, e.g. [1, 3, 320, 320]")
    pad_left: Optional[int] = None
    pad_top: Optional[int] = None
    scale: Optional[float] = None


class InferenceResponseMessage(BaseModel):
    ok: bool
    output_length: Optional[int] = Field(None, description="Element count of the first output")
    output_dims: Optional[List[int]] = Field(None, description="Shape of the first output")
    error_kind: Optional[str] = None
    message: Optional[str] = None


def validate_shape(tensor: np.ndarray, dims: Sequence[int]) -> None:
    """
    Check that ``tensor`` holds exactly prod(dims) elements.

    Raises:
        ShapeMismatchError: On non-positive dims or a length mismatch.
    """
    try:
        dims = [int(d) for d in dims]
    except (TypeError, ValueError) as e:
        raise ShapeMismatchError(f"Invalid tensor dims: {dims!r}") from e
    if not dims or any(d <= 0 for d in dims):
        raise ShapeMismatchError(f"Invalid tensor dims: {dims}")
    expected = math.prod(dims)
    actual = int(np.asarray(tensor).size)
    if actual != expected:
        raise ShapeMismatchError(
            f"Tensor length {actual} does not match dims {list(dims)} (expected {expected})"
        )


def encode_request(request: InferenceRequest) -> Dict[str, Any]:
    data = np.ascontiguousarray(request.tensor, dtype=_WIRE_DTYPE).reshape(-1)
    message = InferenceRequestMessage(
        tensor_data=base64.b64encode(data.tobytes()).decode("ascii"),
        dims=[int(d) for d in request.dims],
        pad_left=request.pad_left,
        pad_top=request.pad_top,
        scale=request.scale,
    )
    return message.model_dump()


def decode_request(payload: Any) -> InferenceRequest:
    """
    Parse a request message into an InferenceRequest with its own buffer.

    Raises:
        ShapeMismatchError: If the payload is malformed.
    """
    if not isinstance(payload, Mapping):
        raise ShapeMismatchError("Request payload must be an object")
    try:
        message = InferenceRequestMessage.model_validate(payload)
    except ValidationError as e:
        raise ShapeMismatchError(f"Malformed request payload: {e.error_count()} error(s)") from e
    if message.type != MESSAGE_TYPE:
        raise ShapeMismatchError(f"Unsupported message type: {message.type}")

    try:
        raw = base64.b64decode(message.tensor_data, validate=True)
        tensor = np.frombuffer(raw, dtype=_WIRE_DTYPE).astype(np.float32)
    except (binascii.Error, ValueError) as e:
        raise ShapeMismatchError(f"Undecodable tensor data: {e}") from e

    return InferenceRequest(
        tensor=tensor,
        dims=tuple(message.dims),
        pad_left=message.pad_left,
        pad_top=message.pad_top,
        scale=message.scale,
    )


def encode_response(response: InferenceResponse) -> Dict[str, Any]:
    return InferenceResponseMessage(**response.to_dict()).model_dump(exclude_none=True)


def decode_response(payload: Any) -> InferenceResponse:
    """
    Parse a response message.

    Raises:
        ValueError: If the payload is not a well-formed response.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("Response payload must be an object")
    message = InferenceResponseMessage.model_validate(payload)
    if message.ok:
        if message.output_length is None or message.output_dims is None:
            raise ValueError("Success response without output summary")
        return InferenceResponse.success(message.output_length, message.output_dims)
    if not message.error_kind:
        raise ValueError("Error response without error_kind")
    return InferenceResponse(error_kind=message.error_kind, message=message.message or "")
