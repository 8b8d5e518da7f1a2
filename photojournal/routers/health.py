import time

from fastapi import APIRouter

from photojournal import __version__
from photojournal.services.backend import backend_available

router = APIRouter(tags=["ops"])

startup_time = time.time()


@router.get("/health")
async def health():
    configured = backend_available()
    return {
        "status": "healthy" if configured else "unavailable",
        "backend_configured": configured,
        "version": __version__,
        "uptime_seconds": round(time.time() - startup_time, 2),
    }
