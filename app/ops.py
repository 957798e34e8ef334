# app/ops.py
"""
Ops endpoints for liveness/readiness.

- /live  : 200 while the process can serve requests
- /ready : 200 once the allow-list is loaded; 503 before startup and during shutdown

Readiness is app.state.is_ready, managed by the lifespan in app.main.
"""

from fastapi import APIRouter, Request, Response, status

router = APIRouter(tags=["ops"])


@router.get("/live")
async def live() -> dict:
    return {"status": "live"}


@router.get("/ready")
async def ready(request: Request):
    if getattr(request.app.state, "is_ready", False):
        return {
            "status": "ready",
            "allowed_clients": getattr(request.app.state, "allowed_client_count", 0),
        }
    return Response(
        content='{"status":"not_ready"}',
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        media_type="application/json",
    )
