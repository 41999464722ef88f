"""
FastAPI application factory for the inference worker.

Routes:
- POST /api/v1/infer   -> one inference request, one response message
- GET  /api/v1/healthz -> model session state
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from inference.backend import InferenceEngine
from inference.session import ModelSessionManager, get_session_manager
from models.config import Config
from ops.process import restart_process
from orchestrator.worker import InferenceWorker
from runtime.lifecycle import WorkerLifecycle

from .routes import api


def create_app(
    config: Optional[Config] = None,
    manager: Optional[ModelSessionManager] = None,
    engine: Optional[InferenceEngine] = None,
    restart: Optional[Callable[[], None]] = None,
) -> FastAPI:
    """Create the worker app; the model loads in the background after startup."""
    config = config or Config()
    manager = manager or get_session_manager(engine)
    worker = InferenceWorker(manager, input_name=config.model.input_name)
    lifecycle = WorkerLifecycle(
        manager,
        config.model.path,
        restart_delay_s=config.worker.restart_delay_s,
        restart=restart or restart_process,
        install_marker=config.worker.install_marker,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Serve while loading: requests before READY fail fast with ModelNotReadyError.
        start_task = asyncio.create_task(lifecycle.start())
        app.state.start_task = start_task
        try:
            yield
        finally:
            lifecycle.cancel_restart()
            if not start_task.done():
                start_task.cancel()
            logging.info("Worker shutting down")

    app = FastAPI(
        title="Letterbox Inference Worker",
        version="0.1.0",
        description="Holds one ONNX model session and answers inference requests",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.manager = manager
    app.state.worker = worker
    app.state.lifecycle = lifecycle

    app.include_router(api.router_v1)
    return app
