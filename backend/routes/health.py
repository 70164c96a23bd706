"""Health check route."""

from datetime import datetime, timezone

from fastapi import APIRouter

from config import settings

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Liveness check. No external calls; never touches the price cache."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "service": "bitcoin-monitor-api",
        "commit": settings.git_sha,
    }
