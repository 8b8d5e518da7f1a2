# SecurityHeadersMiddleware, RequestContextMiddleware
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from fastapi import Request, Response

from photojournal.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        response: Response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "same-origin"
        if (settings.APP_ENV or "").strip().lower() == "production":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        start = time.time()
        rid = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        request.state.rid = rid
        response: Response = await call_next(request)
        response.headers["x-request-id"] = rid
        response.headers["server-timing"] = f"total;dur={(time.time() - start) * 1000:.2f}"
        return response
