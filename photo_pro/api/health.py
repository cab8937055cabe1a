"""Health check endpoints."""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

from .. import __version__

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _timestamp(),
        "service": "photo-pro",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness check: the editor is wired with a configured client."""
    editor = getattr(request.app.state, "editor", None)
    return {
        "ready": editor is not None,
        "model": editor.client.model if editor is not None else None,
        "timestamp": _timestamp(),
    }
