"""
Worker-side request handling.

Every call returns a response: validation errors, a session that is not
ready, and engine failures all come back as error payloads instead of
escaping to the transport.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

import numpy as np

from inference.session import ModelSessionManager
from inference.tensor import TransientTensor
from models.errors import InferenceError, OrchestratorError
from models.messages import InferenceRequest, InferenceResponse

from .protocol import decode_request, encode_response, validate_shape

DEFAULT_INPUT_NAME = "images"


class InferenceWorker:
    """Runs single forward passes against the manager's current session."""

    def __init__(self, manager: ModelSessionManager, input_name: str = DEFAULT_INPUT_NAME):
        self._manager = manager
        self.input_name = input_name
        self.requests_handled = 0
        self.requests_failed = 0

    async def run_inference(self, request: InferenceRequest) -> InferenceResponse:
        self.requests_handled += 1
        try:
            return await self._run(request)
        except OrchestratorError as e:
            self.requests_failed += 1
            logging.warning(f"Inference rejected: {e.kind}: {e.message}")
            return InferenceResponse.failure(e)
        except Exception as e:
            self.requests_failed += 1
            logging.exception("Inference failed")
            return InferenceResponse.failure(InferenceError(f"Inference failed: {e}"))

    async def _run(self, request: InferenceRequest) -> InferenceResponse:
        validate_shape(request.tensor, request.dims)
        session = self._manager.get_session()

        output_names = list(self._manager.output_names)
        if not output_names:
            raise InferenceError("Model declares no outputs")

        with TransientTensor(request.tensor, request.dims) as tensor:
            outputs = await asyncio.to_thread(session.run, {self.input_name: tensor.array})

        first = np.asarray(outputs[output_names[0]])
        logging.debug(f"Raw output '{output_names[0]}': shape={first.shape}")
        return InferenceResponse.success(first.size, first.shape)

    async def handle_message(self, payload: Any) -> Dict[str, Any]:
        """Wire-level entry point: request message in, response message out."""
        try:
            request = decode_request(payload)
        except OrchestratorError as e:
            self.requests_handled += 1
            self.requests_failed += 1
            logging.warning(f"Rejected malformed request: {e.message}")
            return encode_response(InferenceResponse.failure(e))
        response = await self.run_inference(request)
        return encode_response(response)
