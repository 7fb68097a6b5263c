from __future__ import annotations

from fastapi import APIRouter, Request

from .config import MCP_MOUNT_PATH, SERVICE_TITLE


router = APIRouter()


@router.get("/")
def root():
    return {"service": SERVICE_TITLE, "status": "ok", "mcp": f"{MCP_MOUNT_PATH}/"}


@router.get("/healthz")
def health_check(request: Request):
    service = getattr(request.app.state, "service", None)
    accepting = service is not None and service.accepting
    return {"status": "ok" if accepting else "shutting_down", "service": SERVICE_TITLE}
