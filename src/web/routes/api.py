from __future__ import annotations

from fastapi import APIRouter, Request

from orchestrator.protocol import InferenceResponseMessage

from ..api_models import HealthResponse
from ..services.health_service import HealthService

router_v1 = APIRouter(prefix="/api/v1")


@router_v1.post("/infer", response_model=InferenceResponseMessage, response_model_exclude_none=True)
async def infer(request: Request):
    """
    Run one inference.

    Always answers 200 with a response message; failures (including bodies
    that are not JSON) are reported in the payload.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    return await request.app.state.worker.handle_message(payload)


@router_v1.get("/healthz", response_model=HealthResponse)
def healthz(request: Request):
    state = request.app.state
    return HealthService(
        manager=state.manager,
        worker=state.worker,
        lifecycle=state.lifecycle,
    ).get_health_summary()
