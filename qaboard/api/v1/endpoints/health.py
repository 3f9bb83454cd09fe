"""
Health checks - for load balancers, Kubernetes, and monitoring.
Liveness answers without touching the store; readiness round-trips to it.
"""

from fastapi import APIRouter

from qaboard.config import get_settings
from qaboard.db.session import DbSession, ping

router = APIRouter()
settings = get_settings()


@router.get("")
async def health():
    """Liveness: is the process up?"""
    return {"status": "ok", "app": settings.app_name}


@router.get("/ready")
async def ready(session: DbSession):
    """Readiness: can the store be reached? StoreUnavailable maps to 503."""
    await ping(session)
    return {"status": "ready"}
