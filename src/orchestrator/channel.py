"""
Cross-context channels.

A channel delivers one request payload and returns exactly one response
payload. When the worker endpoint is gone (closed channel, connection
refused, dropped mid-call, non-2xx reply) the channel raises
ChannelClosedError.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

INFER_PATH = "/api/v1/infer"


class ChannelClosedError(ConnectionError):
    """The other side of the channel went away before responding."""


class Channel(ABC):
    @abstractmethod
    async def request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send one request and wait for its response."""

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "Channel":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class LocalChannel(Channel):
    """
    In-process channel to an InferenceWorker.

    Payloads are round-tripped through JSON so both sides hold independent
    copies, the same as across a real process boundary.
    """

    def __init__(self, worker):
        self._worker = worker
        self._closed = False

    async def request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._closed or self._worker is None:
            raise ChannelClosedError("Worker endpoint is closed")
        reply = await self._worker.handle_message(json.loads(json.dumps(payload)))
        return json.loads(json.dumps(reply))

    async def close(self) -> None:
        self._closed = True


class HttpChannel(Channel):
    """
    HTTP channel to a worker process.

    No timeout by default: the call stays open until the worker answers or
    the connection drops.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        path: str = INFER_PATH,
    ):
        self._path = path
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(timeout_s))

    async def request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self._client.post(self._path, json=payload)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logging.warning(f"Worker channel failed: {e!r}")
            raise ChannelClosedError(f"Worker unavailable: {e}") from e
        except ValueError as e:
            raise ChannelClosedError(f"Unreadable reply from worker: {e}") from e

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
