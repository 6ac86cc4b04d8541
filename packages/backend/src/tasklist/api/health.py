"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the configured store is reachable.
"""

import structlog
from fastapi import APIRouter, Request

from tasklist import __version__
from tasklist.errors import StoreUnavailable

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and storage connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await request.app.state.storage.ping()
        checks["storage"] = "ok"
    except StoreUnavailable as e:
        logger.warning("health.storage_unavailable", error=str(e))
        checks["storage"] = "error"

    healthy = all(v == "ok" for k, v in checks.items() if k != "version")
    return {"ok": healthy, "status": "healthy" if healthy else "degraded", **checks}
