"""
Process-wide access to the Supabase backend.

Configuration is checked once; when credentials are missing the backend stays
unavailable and every caller gets a ConfigurationError instead of a crash.
"""

import logging
from typing import Optional

from photojournal.config import settings
from photojournal.core.errors import ConfigurationError
from photojournal.services.access_client import AccessClient
from photojournal.services.photos import PhotoRepository

_logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Supabase is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."

_client: Optional[AccessClient] = None


def backend_available() -> bool:
    return settings.supabase_configured


def check_configuration() -> bool:
    """Log the backend state once at startup."""
    if not backend_available():
        _logger.warning(NOT_CONFIGURED)
        return False
    _logger.info("Supabase backend configured at %s", settings.SUPABASE_URL)
    return True


def get_access_client() -> AccessClient:
    global _client
    if not backend_available():
        raise ConfigurationError(NOT_CONFIGURED)
    if _client is None:
        _client = AccessClient(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            timeout=settings.HTTP_TIMEOUT,
        )
    return _client


def get_repository(access_token: Optional[str] = None) -> PhotoRepository:
    client = get_access_client()
    if access_token:
        client = client.with_access_token(access_token)
    return PhotoRepository(client)


async def close_backend() -> None:
    global _client
    if _client is not None:
        try:
            await _client.aclose()
        finally:
            _client = None
