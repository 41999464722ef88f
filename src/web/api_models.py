from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Worker health, polled by the UI before it sends images."""
    state: str = Field(..., description="uninitialized|loading|ready|failed")
    model_location: Optional[str] = None
    output_names: List[str] = Field(default_factory=list)
    last_error: Optional[str] = None
    load_time_s: Optional[float] = None
    restart_pending: bool = False
    requests_handled: int = 0
    requests_failed: int = 0
    pid: int
    platform: str
    python: str
    onnxruntime: Optional[str] = None
    timestamp: float
