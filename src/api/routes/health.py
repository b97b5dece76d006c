"""
Health check endpoints.

/health reports each component the study depends on: the conversation
store, the seeded task catalog and the configured model provider.
/health/ready gates traffic on the store answering with a seeded catalog.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from src.core.config import settings
from src.llm.client import PROVIDER_DEFAULTS
from src.persistence.database import check_database_health

log = structlog.get_logger(__name__)

router = APIRouter()


def _catalog_status(db_health: dict) -> dict:
    task_count = db_health.get("task_count", 0)
    return {
        "status": "healthy" if task_count >= settings.total_tasks else "incomplete",
        "task_count": task_count,
        "expected": settings.total_tasks,
    }


def _llm_status() -> dict:
    provider = settings.llm_provider
    return {
        "status": "configured" if settings.provider_api_key() else "missing_api_key",
        "provider": provider,
        "model": settings.llm_model or PROVIDER_DEFAULTS[provider]["model"],
    }


@router.get("/health")
async def health_check():
    """
    Component health for monitoring.

    Status is "unhealthy" when the store is unreachable, "degraded" when the
    catalog is short of total_tasks or the provider key is missing.
    """
    db_health = await check_database_health()
    components = {"database": db_health, "llm": _llm_status()}

    if db_health["status"] != "healthy":
        overall_status = "unhealthy"
    else:
        components["task_catalog"] = _catalog_status(db_health)
        degraded = (
            components["task_catalog"]["status"] != "healthy"
            or components["llm"]["status"] != "configured"
        )
        overall_status = "degraded" if degraded else "healthy"

    return {
        "status": overall_status,
        "version": "0.1.0",
        "debug": settings.debug,
        "components": components,
    }


@router.get("/health/live")
async def liveness():
    """Returns 200 while the process is serving."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness():
    """200 once the store answers and holds at least one task, 503 otherwise."""
    db_health = await check_database_health()

    if db_health["status"] != "healthy":
        reason = "Database not ready"
    elif not db_health.get("task_count"):
        reason = "Task catalog not seeded"
    else:
        return {"status": "ready"}

    log.warning("readiness_failed", reason=reason, error=db_health.get("error"))
    return JSONResponse(
        status_code=503, content={"status": "not_ready", "error": reason}
    )
