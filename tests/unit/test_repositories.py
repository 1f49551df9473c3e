"""Unit tests for the record repositories and the Supabase storage gateway."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from gsl_cms.core.exceptions import UpstreamRepositoryError, UpstreamStorageError
from gsl_cms.models.database import create_tables, make_sessionmaker
from gsl_cms.services.record_service import SqlRecordRepository, SupabaseRecordRepository
from gsl_cms.services.storage_service import SupabaseObjectStore


def run(coro):
    return asyncio.run(coro)


async def _with_sql_repository(scenario):
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    try:
        await create_tables(engine)
        return await scenario(SqlRecordRepository(make_sessionmaker(engine)))
    finally:
        await engine.dispose()


# ── SQL backend ─────────────────────────────────────────────
class TestSqlRecordRepository:
    def test_insert_assigns_id_and_created_at(self):
        async def scenario(repo):
            return await repo.insert("banners", {"title": "Spring", "image_url": "u"})

        row = run(_with_sql_repository(scenario))
        assert row["id"] == 1
        assert row["title"] == "Spring"
        assert row["created_at"] is not None

    def test_list_is_newest_first(self):
        async def scenario(repo):
            await repo.insert("clients", {"name": "a", "website": "w", "logo_url": "u"})
            await repo.insert("clients", {"name": "b", "website": "w", "logo_url": "u"})
            return await repo.list_rows("clients")

        rows = run(_with_sql_repository(scenario))
        assert [r["name"] for r in rows] == ["b", "a"]

    def test_get_and_update(self):
        async def scenario(repo):
            row = await repo.insert(
                "services", {"category": "Merchandising", "title": "Rack", "image_url": "u"}
            )
            updated = await repo.update("services", row["id"], {"title": "Rack A"})
            fetched = await repo.get("services", row["id"])
            return updated, fetched

        updated, fetched = run(_with_sql_repository(scenario))
        assert updated["title"] == "Rack A"
        assert updated["image_url"] == "u"
        assert fetched["title"] == "Rack A"

    def test_missing_rows(self):
        async def scenario(repo):
            return (
                await repo.get("banners", 42),
                await repo.update("banners", 42, {"title": "x"}),
            )

        assert run(_with_sql_repository(scenario)) == (None, None)

    def test_delete(self):
        async def scenario(repo):
            row = await repo.insert("banners", {"title": "Spring", "image_url": "u"})
            await repo.delete("banners", row["id"])
            await repo.delete("banners", row["id"])  # already gone: no-op
            return await repo.list_rows("banners")

        assert run(_with_sql_repository(scenario)) == []

    def test_database_errors_are_upstream_errors(self):
        async def scenario(repo):
            # title is NOT NULL
            await repo.insert("banners", {"title": None, "image_url": "u"})

        with pytest.raises(UpstreamRepositoryError):
            run(_with_sql_repository(scenario))

    def test_row_without_image_url(self):
        async def scenario(repo):
            await repo.insert("clients", {"name": "Acme", "website": None, "logo_url": None})
            return await repo.list_rows("clients")

        rows = run(_with_sql_repository(scenario))
        assert rows[0]["logo_url"] is None


# ── Supabase backend ────────────────────────────────────────
class TestSupabaseRecordRepository:
    def test_insert_returns_first_row(self):
        client = MagicMock()
        query = client.table.return_value.insert.return_value
        query.execute.return_value = SimpleNamespace(data=[{"id": 1, "title": "Spring"}])

        row = run(SupabaseRecordRepository(client).insert("banners", {"title": "Spring"}))

        client.table.assert_called_with("banners")
        assert row == {"id": 1, "title": "Spring"}

    def test_list_orders_by_created_at_desc(self):
        client = MagicMock()
        ordered = client.table.return_value.select.return_value.order.return_value
        ordered.execute.return_value = SimpleNamespace(data=[])

        assert run(SupabaseRecordRepository(client).list_rows("clients")) == []
        client.table.return_value.select.return_value.order.assert_called_with(
            "created_at", desc=True
        )

    def test_update_of_missing_row_returns_none(self):
        client = MagicMock()
        chain = client.table.return_value.update.return_value.eq.return_value
        chain.execute.return_value = SimpleNamespace(data=[])

        assert run(SupabaseRecordRepository(client).update("services", 3, {"title": "x"})) is None

    def test_client_errors_are_wrapped(self):
        client = MagicMock()
        client.table.return_value.delete.return_value.eq.return_value.execute.side_effect = (
            RuntimeError({"code": "42501", "message": "permission denied"})
        )

        with pytest.raises(UpstreamRepositoryError) as exc_info:
            run(SupabaseRecordRepository(client).delete("clients", 7))
        assert exc_info.value.error == {"code": "42501", "message": "permission denied"}


class TestSupabaseObjectStore:
    def test_upload_uses_upsert(self):
        client = MagicMock()
        run(SupabaseObjectStore(client, "gsl").upload("banners/a.webp", b"data", "image/webp"))

        client.storage.from_.assert_called_with("gsl")
        client.storage.from_.return_value.upload.assert_called_once_with(
            "banners/a.webp", b"data", {"content-type": "image/webp", "upsert": "true"}
        )

    def test_remove_failure_raises_storage_error(self):
        client = MagicMock()
        client.storage.from_.return_value.remove.side_effect = RuntimeError(
            {"statusCode": "404", "error": "not_found"}
        )

        with pytest.raises(UpstreamStorageError) as exc_info:
            run(SupabaseObjectStore(client, "gsl").remove(["banners/a.webp"]))
        assert exc_info.value.error["statusCode"] == "404"

    def test_public_url_drops_trailing_question_mark(self):
        client = MagicMock()
        client.storage.from_.return_value.get_public_url.return_value = (
            "https://x.supabase.co/storage/v1/object/public/gsl/banners/a.webp?"
        )

        url = SupabaseObjectStore(client, "gsl").public_url("banners/a.webp")
        assert url == "https://x.supabase.co/storage/v1/object/public/gsl/banners/a.webp"
