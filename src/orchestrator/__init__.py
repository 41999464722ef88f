"""
Request/response orchestration between the UI context and the worker context.
"""

from .channel import Channel, ChannelClosedError, HttpChannel, LocalChannel
from .client import InferenceClient
from .protocol import (
    MESSAGE_TYPE,
    InferenceRequestMessage,
    InferenceResponseMessage,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
    validate_shape,
)
from .worker import DEFAULT_INPUT_NAME, InferenceWorker

__all__ = [
    "Channel",
    "ChannelClosedError",
    "HttpChannel",
    "LocalChannel",
    "InferenceClient",
    "MESSAGE_TYPE",
    "InferenceRequestMessage",
    "InferenceResponseMessage",
    "decode_request",
    "decode_response",
    "encode_request",
    "encode_response",
    "validate_shape",
    "DEFAULT_INPUT_NAME",
    "InferenceWorker",
]
