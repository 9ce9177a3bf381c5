"""Health check endpoints (liveness / readiness)."""

from fastapi import APIRouter, Response

from math_tutor.core.config import get_settings

router = APIRouter(tags=["health"])


def _check_openai_key() -> str:
    return "ready" if get_settings().OPENAI_API_KEY else "not_ready"


@router.get("/health")
async def health_check(response: Response) -> dict:
    """Combined health check."""
    openai_status = "healthy" if _check_openai_key() == "ready" else "unconfigured"
    overall = "healthy" if openai_status == "healthy" else "degraded"
    if overall == "degraded":
        response.status_code = 503

    return {
        "status": overall,
        "services": {
            "api": "healthy",
            "openai": openai_status,
        },
    }


@router.get("/health/live")
async def liveness() -> dict:
    """Liveness probe: the process is up."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness(response: Response) -> dict:
    """Readiness probe: the upstream model is configured."""
    checks = {"openai": _check_openai_key()}

    all_ready = all(v == "ready" for v in checks.values())
    if not all_ready:
        response.status_code = 503

    return {"status": "ready" if all_ready else "not_ready", "checks": checks}
