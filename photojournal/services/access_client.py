"""
Thin async binding over the Supabase REST surface (rows, storage, auth).

The client owns no business logic: it shapes requests, attaches the caller's
credentials and converts failed responses into typed errors. Row-level
security is evaluated by the backend on every call.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from photojournal.core.errors import (
    AuthorizationError,
    TransportError,
    ValidationError,
    error_from_response,
)

logger = logging.getLogger(__name__)

IS_NULL = "is.null"
NOT_NULL = "not.is.null"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def eq(value: Any) -> str:
    return f"eq.{value}"


@dataclass
class AuthSession:
    access_token: str
    user_id: str
    email: Optional[str] = None
    expires_in: Optional[int] = None


class AccessClient:
    """Per-caller view of the backend; clones share one connection pool."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        access_token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.access_token = access_token
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    def with_access_token(self, access_token: Optional[str]) -> "AccessClient":
        return AccessClient(self.url, self.anon_key, access_token=access_token, http=self._http)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        try:
            resp = await self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                content=content,
                headers=self._headers(headers),
            )
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        if resp.is_error:
            raise error_from_response(resp.status_code, _payload(resp))
        return resp

    # ---- rows ----

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Optional[Mapping[str, str]] = None,
        order: Sequence[Tuple[str, bool]] = (),
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Any:
        """Run a row query; `order` is a list of (column, descending) pairs."""
        params: Dict[str, Any] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = ",".join(f"{col}.{'desc' if desc else 'asc'}" for col, desc in order)
        if offset is not None:
            params["offset"] = offset
        if limit is not None:
            params["limit"] = limit
        resp = await self._request("GET", f"/rest/v1/{table}", params=params)
        return resp.json()

    async def insert(self, table: str, row: Mapping[str, Any], *, columns: str = "*") -> Dict[str, Any]:
        resp = await self._request(
            "POST",
            f"/rest/v1/{table}",
            params={"select": columns},
            json=dict(row),
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return resp.json()

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, str],
        columns: str = "id",
    ) -> List[Dict[str, Any]]:
        """Patch matching rows and return the ones that changed.

        Row policies filter rather than reject, so an empty list can also mean
        the caller was not allowed to touch the row.
        """
        params: Dict[str, Any] = {"select": columns}
        params.update(filters)
        resp = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=params,
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )
        return _rows(resp)

    async def delete(self, table: str, *, filters: Mapping[str, str], columns: str = "id") -> List[Dict[str, Any]]:
        """Delete matching rows and return the ones that were removed."""
        if not filters:
            raise ValidationError("Refusing to delete without a filter")
        params: Dict[str, Any] = {"select": columns}
        params.update(filters)
        resp = await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=params,
            headers={"Prefer": "return=representation"},
        )
        return _rows(resp)

    # ---- storage ----

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path, safe='/')}"

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str = "application/octet-stream",
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> str:
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path, safe='/')}",
            content=data,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "cache-control": f"max-age={cache_control}",
                "x-upsert": "true" if upsert else "false",
            },
        )
        return path

    async def remove(self, bucket: str, path: str) -> None:
        await self._request("DELETE", f"/storage/v1/object/{bucket}/{quote(path, safe='/')}")

    # ---- auth ----

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            resp = await self._request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except ValidationError as exc:
            # GoTrue answers bad credentials with a plain 400
            raise AuthorizationError(exc.message, status_code=401, code=exc.code) from exc
        body = resp.json()
        user = body.get("user") or {}
        return AuthSession(
            access_token=body["access_token"],
            user_id=str(user.get("id", "")),
            email=user.get("email"),
            expires_in=body.get("expires_in"),
        )

    async def sign_out(self) -> None:
        if not self.access_token:
            return
        await self._request("POST", "/auth/v1/logout")

    async def get_user(self) -> Dict[str, Any]:
        if not self.access_token:
            raise AuthorizationError("Not signed in", status_code=401)
        resp = await self._request("GET", "/auth/v1/user")
        return resp.json()


def _payload(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _rows(resp: httpx.Response) -> List[Dict[str, Any]]:
    # A proxy or older server may answer 204 and drop the representation.
    if resp.status_code == 204 or not resp.content:
        return []
    body = resp.json()
    return body if isinstance(body, list) else [body]
