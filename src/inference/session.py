"""
Model session lifecycle.

Owns the single loaded inference session of the worker process and moves it
through UNINITIALIZED -> LOADING -> READY | FAILED. A load that is already in
flight is shared by every concurrent caller, so one initialize storm results
in exactly one engine load. FAILED is not terminal; the next initialize call
starts a fresh load. There is no retry loop in here.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Optional, Tuple

from models.errors import ModelInitError, ModelNotReadyError

from .backend import ExecutionOptions, InferenceEngine, SessionHandle


class SessionState(str, Enum):
    """Model session lifecycle states."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ModelSessionManager:
    """
    Lifecycle owner for one inference session.

    Example:
        manager = ModelSessionManager(OnnxRuntimeEngine())
        await manager.initialize("models/best.onnx")
        session = manager.get_session()
    """

    def __init__(self, engine: Optional[InferenceEngine] = None):
        self._engine = engine
        self._state = SessionState.UNINITIALIZED
        self._session: Optional[SessionHandle] = None
        self._output_names: Tuple[str, ...] = ()
        self._model_location: Optional[str] = None
        self._last_error: Optional[str] = None
        self._load_time_s: Optional[float] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def output_names(self) -> Tuple[str, ...]:
        return self._output_names

    @property
    def model_location(self) -> Optional[str]:
        return self._model_location

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def load_time_s(self) -> Optional[float]:
        return self._load_time_s

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    async def initialize(self, model_location: str, options: Optional[ExecutionOptions] = None) -> None:
        """
        Load the model unless it is already loaded or loading.

        Raises:
            ModelInitError: If the load fails. Callers coalesced onto the
                same load all receive it.
        """
        if self._state is SessionState.READY:
            return

        if self._state is SessionState.LOADING and self._inflight is not None:
            logging.info("Model load already in progress, waiting for it")
            await asyncio.shield(self._inflight)
            return

        # No await between the state check and here; the transition is atomic
        # with respect to other coroutines on this loop.
        self._state = SessionState.LOADING
        self._model_location = model_location
        self._last_error = None
        self._inflight = asyncio.ensure_future(self._load(model_location, options or ExecutionOptions()))
        await asyncio.shield(self._inflight)

    async def _load(self, model_location: str, options: ExecutionOptions) -> None:
        logging.info(f"Loading model from: {model_location}")
        start = time.time()
        try:
            if self._engine is None:
                from .onnx_backend import OnnxRuntimeEngine
                self._engine = OnnxRuntimeEngine()
            session = await asyncio.to_thread(self._engine.create, model_location, options)
            output_names = tuple(session.output_names)
        except Exception as e:
            self._state = SessionState.FAILED
            self._session = None
            self._output_names = ()
            self._last_error = str(e)
            logging.error(f"Error initializing model: {e}")
            raise ModelInitError(f"Failed to load model from {model_location}: {e}") from e
        finally:
            self._inflight = None

        self._session = session
        self._output_names = output_names
        self._load_time_s = time.time() - start
        self._state = SessionState.READY
        logging.info(f"Model initialized in {self._load_time_s:.2f}s (outputs={list(output_names)})")

    def get_session(self) -> SessionHandle:
        """
        Return the loaded session.

        Raises:
            ModelNotReadyError: Unless the state is READY.
        """
        if self._state is not SessionState.READY or self._session is None:
            raise ModelNotReadyError(
                f"Model not initialized (state={self._state.value}). Try again later."
            )
        return self._session

    async def reload(self, model_location: Optional[str] = None, options: Optional[ExecutionOptions] = None) -> None:
        """Drop the current session and load again; joins a load already in flight."""
        if self._state is SessionState.LOADING and self._inflight is not None:
            await asyncio.shield(self._inflight)
            return

        location = model_location or self._model_location
        if not location:
            raise ModelInitError("No model location to reload from")

        logging.info(f"Reloading model (previous state={self._state.value})")
        self._session = None
        self._output_names = ()
        self._state = SessionState.UNINITIALIZED
        await self.initialize(location, options)

    def status(self) -> dict:
        return {
            "state": self._state.value,
            "model_location": self._model_location,
            "output_names": list(self._output_names),
            "last_error": self._last_error,
            "load_time_s": self._load_time_s,
        }


# Process-wide instance
_manager: Optional[ModelSessionManager] = None


def get_session_manager(engine: Optional[InferenceEngine] = None) -> ModelSessionManager:
    """Return the process-wide session manager, creating it on first use."""
    global _manager
    if _manager is None:
        _manager = ModelSessionManager(engine)
    return _manager


def reset_session_manager() -> None:
    """Forget the process-wide manager (worker teardown)."""
    global _manager
    _manager = None
