"""
Generation run endpoints

- GET  /runs/{run_id}          latest progress snapshot
- GET  /runs/{run_id}/stream   Server-Sent Events, one per snapshot, ends at a terminal phase
- POST /runs/{run_id}/cancel   request cooperative cancellation
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from typing import Any, Dict

from appforge.api.deps import get_services
from appforge.core.exceptions import NotFoundError
from appforge.core.services import AppServices
from appforge.schemas.generation import GenerationProgress


router = APIRouter(prefix="/runs", tags=["Runs"])


def _require_run(services: AppServices, run_id: str) -> None:
    if not services.event_bus.has_run(run_id):
        raise NotFoundError("Run", run_id)


@router.get("/{run_id}", response_model=GenerationProgress)
async def get_run(run_id: str, services: AppServices = Depends(get_services)):
    _require_run(services, run_id)
    latest = services.event_bus.latest(run_id)
    # Accepted but not started yet
    return latest or GenerationProgress(run_id=run_id, message="Queued")


@router.get("/{run_id}/stream")
async def stream_run(run_id: str, services: AppServices = Depends(get_services)):
    _require_run(services, run_id)
    return StreamingResponse(
        services.event_bus.sse_stream(run_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/{run_id}/cancel")
async def cancel_run(run_id: str, services: AppServices = Depends(get_services)) -> Dict[str, Any]:
    _require_run(services, run_id)
    return {"run_id": run_id, "cancelled": services.cancel_run(run_id)}
