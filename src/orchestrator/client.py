"""
UI-side inference client.

Preprocesses images and runs inference through a Channel. A vanished worker
or an unreadable reply becomes an OrchestratorUnavailableError response, so
callers always get an InferenceResponse back.
"""

from __future__ import annotations

import logging
import os
from typing import Tuple, Union

import numpy as np

from models.errors import OrchestratorUnavailableError
from models.image import ImageData
from models.letterbox import LetterboxResult
from models.messages import InferenceRequest, InferenceResponse
from preprocess.letterbox import DEFAULT_TARGET_SIZE, process_image

from .channel import Channel, ChannelClosedError
from .protocol import decode_response, encode_request


class InferenceClient:
    def __init__(self, channel: Channel, target_size: int = DEFAULT_TARGET_SIZE):
        self._channel = channel
        self.target_size = target_size

    def process_image(self, image: Union[ImageData, np.ndarray, str, os.PathLike]) -> LetterboxResult:
        return process_image(image, target_size=self.target_size)

    async def run_inference(self, request: Union[InferenceRequest, LetterboxResult]) -> InferenceResponse:
        if isinstance(request, LetterboxResult):
            request = InferenceRequest.from_letterbox(request)

        try:
            reply = await self._channel.request(encode_request(request))
        except ChannelClosedError as e:
            logging.warning(f"Inference channel closed: {e}")
            return InferenceResponse.failure(OrchestratorUnavailableError(str(e)))

        try:
            return decode_response(reply)
        except ValueError as e:
            return InferenceResponse.failure(
                OrchestratorUnavailableError(f"Malformed response from worker: {e}")
            )

    async def detect(self, image: Union[ImageData, np.ndarray, str, os.PathLike]) -> Tuple[LetterboxResult, InferenceResponse]:
        """Preprocess then infer; preprocessing errors propagate to the caller."""
        result = self.process_image(image)
        response = await self.run_inference(result)
        return result, response

    async def close(self) -> None:
        await self._channel.close()
