from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from photojournal.services.backend import get_repository
from photojournal.services.photos import PhotoRepository


bearer = HTTPBearer(auto_error=False)


async def require_token(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> str:
    """Bearer token of the caller, forwarded untouched to the backend.

    Admin status is decided by the backend's row-level policies, not here.
    """
    if not creds or not creds.scheme.lower().startswith("bearer") or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return creds.credentials


async def public_repository() -> PhotoRepository:
    return get_repository()


async def admin_repository(token: str = Depends(require_token)) -> PhotoRepository:
    return get_repository(token)
