# Top imports
import logging
from contextlib import asynccontextmanager

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from photojournal import __version__
from photojournal.config import settings
from photojournal.core.errors import PhotoJournalError
from photojournal.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from photojournal.core.rate_limit import limiter
from photojournal.routers import router
from photojournal.services.backend import check_configuration, close_backend, get_access_client

logging.basicConfig(
    level=getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.1, environment=settings.APP_ENV)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Photo Journal API (%s)...", settings.APP_ENV)
    if check_configuration():
        # Build the shared client before the first request arrives.
        get_access_client()
    yield
    logger.info("Shutting down Photo Journal API...")
    await close_backend()


app = FastAPI(
    title="Photo Journal API",
    description="Public photo journal feed and single-admin management backed by Supabase",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(PhotoJournalError)
async def photojournal_error_handler(request: Request, exc: PhotoJournalError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(router)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)


if __name__ == "__main__":
    uvicorn.run("photojournal.main:app", host="0.0.0.0", port=8000)
