"""
Pytest configuration and fixtures for Photo Journal tests
"""

import datetime as dt
import uuid
from typing import Any, Dict, List, Optional

import pytest

from photojournal.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from photojournal.services.access_client import AuthSession
from photojournal.services.photos import PhotoRepository

ADMIN_ID = "7d0c5a36-4a8b-4d33-9d0e-2f1f6c9a11aa"
ADMIN_TOKEN = "admin-token"
BASE_URL = "https://demo.supabase.co"


class FakeState:
    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.objects: Dict[str, bytes] = {}
        self.admins: Dict[str, str] = {ADMIN_TOKEN: ADMIN_ID}
        self.failures: Dict[str, List[Exception]] = {}
        self.calls: List[tuple] = []
        self._clock = dt.datetime(2026, 3, 1, 9, 0, tzinfo=dt.timezone.utc)

    def tick(self) -> str:
        self._clock += dt.timedelta(seconds=1)
        return self._clock.isoformat()


class FakeBackend:
    """In-memory stand-in for AccessClient with the photos policies applied."""

    def __init__(self, state: Optional[FakeState] = None, access_token: Optional[str] = None):
        self.state = state or FakeState()
        self.access_token = access_token
        self.url = BASE_URL

    # ---- test helpers ----

    def fail(self, op: str, exc: Exception) -> None:
        self.state.failures.setdefault(op, []).append(exc)

    def seed(self, title: str, shot_date: str, *, deleted: bool = False, tags=None, caption=None) -> Dict[str, Any]:
        photo_id = str(uuid.uuid4())
        path = f"{ADMIN_ID}/{photo_id}.jpg"
        now = self.state.tick()
        row = {
            "id": photo_id,
            "title": title,
            "caption": caption,
            "tags": tags,
            "shot_date": shot_date,
            "image_path": path,
            "created_at": now,
            "updated_at": now,
            "deleted_at": self.state.tick() if deleted else None,
        }
        self.state.rows[photo_id] = row
        self.state.objects[path] = b"jpeg"
        return dict(row)

    def _maybe_fail(self, op: str) -> None:
        self.state.calls.append((op,))
        pending = self.state.failures.get(op)
        if pending:
            raise pending.pop(0)

    @property
    def _user(self) -> Optional[str]:
        return self.state.admins.get(self.access_token or "")

    def _require_admin(self) -> str:
        if not self._user:
            raise AuthorizationError("new row violates row-level security policy for table \"photos\"", status_code=401)
        return self._user

    def _match(self, row: Dict[str, Any], filters: Dict[str, str]) -> bool:
        for col, cond in filters.items():
            if cond == "is.null" and row[col] is not None:
                return False
            if cond == "not.is.null" and row[col] is None:
                return False
            if cond.startswith("eq.") and str(row[col]) != cond[3:]:
                return False
        return True

    def _visible(self) -> List[Dict[str, Any]]:
        rows = list(self.state.rows.values())
        if not self._user:
            rows = [r for r in rows if r["deleted_at"] is None]
        return rows

    # ---- AccessClient surface ----

    def with_access_token(self, access_token):
        return FakeBackend(self.state, access_token)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{path}"

    async def select(self, table, *, columns="*", filters=None, order=(), offset=None, limit=None):
        self._maybe_fail("select")
        rows = [r for r in self._visible() if self._match(r, filters or {})]
        for col, desc in reversed(list(order)):
            rows.sort(key=lambda r: r[col], reverse=desc)
        start = offset or 0
        end = start + limit if limit is not None else None
        return [dict(r) for r in rows[start:end]]

    async def insert(self, table, row, *, columns="*"):
        self._maybe_fail("insert")
        self._require_admin()
        now = self.state.tick()
        stored = {
            "id": str(uuid.uuid4()),
            "caption": None,
            "tags": [],
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
            **row,
        }
        self.state.rows[stored["id"]] = stored
        return dict(stored)

    async def update(self, table, values, *, filters, columns="id"):
        self._maybe_fail("update")
        # Row policies hide rows a non-admin may not write; nothing is raised.
        matched = [r for r in self.state.rows.values() if self._user and self._match(r, filters)]
        for r in matched:
            r.update(values)
            r["updated_at"] = self.state.tick()
        return [dict(r) for r in matched]

    async def delete(self, table, *, filters, columns="id"):
        self._maybe_fail("delete")
        matched = [r for r in self.state.rows.values() if self._user and self._match(r, filters)]
        for r in matched:
            del self.state.rows[r["id"]]
        return [{"id": r["id"]} for r in matched]

    async def upload(self, bucket, path, data, *, content_type="application/octet-stream", cache_control="3600", upsert=False):
        self._maybe_fail("upload")
        user = self._require_admin()
        if path.split("/", 1)[0] != user:
            raise AuthorizationError("new row violates row-level security policy", status_code=403)
        if path in self.state.objects and not upsert:
            raise ConflictError("The resource already exists")
        self.state.objects[path] = data
        return path

    async def remove(self, bucket, path):
        self._maybe_fail("remove")
        # Storage policies hide objects the caller may not delete.
        if not self._user or path not in self.state.objects:
            raise NotFoundError("Object not found")
        del self.state.objects[path]

    async def sign_in_with_password(self, email, password):
        self._maybe_fail("sign_in")
        if password != "correct horse":
            raise AuthorizationError("Invalid login credentials", status_code=401)
        return AuthSession(access_token=ADMIN_TOKEN, user_id=ADMIN_ID, email=email, expires_in=3600)

    async def sign_out(self):
        self._maybe_fail("sign_out")

    async def get_user(self):
        if not self._user:
            raise AuthorizationError("invalid JWT", status_code=401)
        return {"id": self._user}

    async def aclose(self):
        pass


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def admin_repo(backend) -> PhotoRepository:
    return PhotoRepository(backend.with_access_token(ADMIN_TOKEN), bucket="photos", table="photos")


@pytest.fixture
def public_repo(backend) -> PhotoRepository:
    return PhotoRepository(backend, bucket="photos", table="photos")


@pytest.fixture
def admin_token() -> str:
    return ADMIN_TOKEN


@pytest.fixture
def admin_id() -> str:
    return ADMIN_ID
