"""
Shared pytest fixtures for unit and integration tests.

Supabase is replaced with in-memory fakes wired in through
``app.dependency_overrides`` — no network or credentials needed.
"""

from __future__ import annotations

import io
from collections import defaultdict
from datetime import UTC, datetime
from itertools import count

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from gsl_cms.api.v1.deps import get_object_store, get_record_repository
from gsl_cms.core.exceptions import UpstreamRepositoryError, UpstreamStorageError
from gsl_cms.main import app

PUBLIC_BASE = "https://test.supabase.co/storage/v1/object/public"


class FakeObjectStore:
    """Dict-backed bucket. Set ``fail_upload`` / ``fail_remove`` to simulate outages."""

    def __init__(self, bucket: str = "gsl") -> None:
        self.bucket = bucket
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_upload = False
        self.fail_remove = False

    async def upload(self, path: str, data: bytes, content_type: str, upsert: bool = True) -> None:
        self.calls.append(("upload", path))
        if self.fail_upload:
            raise UpstreamStorageError(error={"statusCode": "403", "message": "new row violates policy"})
        self.objects[path] = (data, content_type)

    async def remove(self, paths: list[str]) -> None:
        self.calls.append(("remove", list(paths)))
        if self.fail_remove:
            raise UpstreamStorageError(error={"statusCode": "500", "message": "storage unavailable"})
        for path in paths:
            self.objects.pop(path, None)

    def public_url(self, path: str) -> str:
        return f"{PUBLIC_BASE}/{self.bucket}/{path}"


class FakeRecordRepository:
    """Dict-backed tables. Add an operation name to ``failing`` to make it raise."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[int, dict]] = defaultdict(dict)
        self.failing: set[str] = set()
        self._ids = count(100)

    def _check(self, op: str) -> None:
        if op in self.failing:
            raise UpstreamRepositoryError(error={"code": "PGRST000", "message": f"{op} failed"})

    def seed(self, table: str, **row) -> dict:
        row.setdefault("id", next(self._ids))
        row.setdefault("created_at", datetime.now(UTC))
        self.tables[table][row["id"]] = row
        return row

    async def insert(self, table: str, row: dict) -> dict:
        self._check("insert")
        return self.seed(table, **row)

    async def list_rows(self, table: str) -> list[dict]:
        self._check("list_rows")
        rows = self.tables[table].values()
        return sorted(rows, key=lambda r: (r["created_at"], r["id"]), reverse=True)

    async def get(self, table: str, record_id: int) -> dict | None:
        self._check("get")
        return self.tables[table].get(record_id)

    async def update(self, table: str, record_id: int, patch: dict) -> dict | None:
        self._check("update")
        row = self.tables[table].get(record_id)
        if row is None:
            return None
        row.update(patch)
        return row

    async def delete(self, table: str, record_id: int) -> None:
        self._check("delete")
        self.tables[table].pop(record_id, None)


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def repository() -> FakeRecordRepository:
    return FakeRecordRepository()


@pytest.fixture
def client(store: FakeObjectStore, repository: FakeRecordRepository):
    """Test client with Supabase swapped for the in-memory fakes."""
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_record_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def _encode(img: Image.Image, fmt: str, **params) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _encode(Image.new("RGB", (16, 12), (200, 30, 30)), "PNG")


@pytest.fixture
def rgba_png_bytes() -> bytes:
    return _encode(Image.new("RGBA", (16, 16), (0, 0, 255, 128)), "PNG")


@pytest.fixture
def gif_bytes() -> bytes:
    img = Image.new("P", (10, 10), 1)
    return _encode(img, "GIF", transparency=0)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode(Image.new("L", (20, 20), 128), "JPEG")
