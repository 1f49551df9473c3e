"""
Record repositories for the banners / clients / services tables.

SupabaseRecordRepository talks to PostgREST through the supabase client (the
production setup). SqlRecordRepository runs the same operations through the
SQLAlchemy models for a self-managed Postgres or a local SQLite file.
Rows are plain dicts in both cases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.concurrency import run_in_threadpool
from supabase import Client

from gsl_cms.core.exceptions import UpstreamRepositoryError, error_payload
from gsl_cms.core.logging import get_logger
from gsl_cms.models.models import MODELS_BY_TABLE, Base

logger = get_logger(__name__)

Row = dict[str, Any]


class RecordRepository(Protocol):
    async def insert(self, table: str, row: Row) -> Row: ...

    async def list_rows(self, table: str) -> list[Row]: ...

    async def get(self, table: str, record_id: int) -> Row | None: ...

    async def update(self, table: str, record_id: int, patch: Row) -> Row | None: ...

    async def delete(self, table: str, record_id: int) -> None: ...


class SupabaseRecordRepository:
    def __init__(self, client: Client) -> None:
        self.client = client

    async def _execute(self, table: str, build: Callable[[Any], Any]) -> Any:
        def run() -> Any:
            return build(self.client.table(table)).execute()

        try:
            return await run_in_threadpool(run)
        except Exception as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error=error_payload(e)) from e

    async def insert(self, table: str, row: Row) -> Row:
        response = await self._execute(table, lambda t: t.insert(row))
        return response.data[0]

    async def list_rows(self, table: str) -> list[Row]:
        response = await self._execute(table, lambda t: t.select("*").order("created_at", desc=True))
        return response.data

    async def get(self, table: str, record_id: int) -> Row | None:
        response = await self._execute(
            table, lambda t: t.select("*").eq("id", record_id).limit(1)
        )
        return response.data[0] if response.data else None

    async def update(self, table: str, record_id: int, patch: Row) -> Row | None:
        response = await self._execute(table, lambda t: t.update(patch).eq("id", record_id))
        return response.data[0] if response.data else None

    async def delete(self, table: str, record_id: int) -> None:
        await self._execute(table, lambda t: t.delete().eq("id", record_id))


class SqlRecordRepository:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    @staticmethod
    def _model(table: str) -> type[Base]:
        return MODELS_BY_TABLE[table]

    async def insert(self, table: str, row: Row) -> Row:
        model = self._model(table)
        try:
            async with self.sessionmaker() as session:
                record = model(**row)
                session.add(record)
                await session.commit()
                return record.to_dict()
        except SQLAlchemyError as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error={"message": str(e)}) from e

    async def list_rows(self, table: str) -> list[Row]:
        model = self._model(table)
        stmt = select(model).order_by(model.created_at.desc(), model.id.desc())
        try:
            async with self.sessionmaker() as session:
                result = await session.scalars(stmt)
                return [record.to_dict() for record in result.all()]
        except SQLAlchemyError as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error={"message": str(e)}) from e

    async def get(self, table: str, record_id: int) -> Row | None:
        try:
            async with self.sessionmaker() as session:
                record = await session.get(self._model(table), record_id)
                return record.to_dict() if record else None
        except SQLAlchemyError as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error={"message": str(e)}) from e

    async def update(self, table: str, record_id: int, patch: Row) -> Row | None:
        try:
            async with self.sessionmaker() as session:
                record = await session.get(self._model(table), record_id)
                if record is None:
                    return None
                for key, value in patch.items():
                    setattr(record, key, value)
                await session.commit()
                return record.to_dict()
        except SQLAlchemyError as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error={"message": str(e)}) from e

    async def delete(self, table: str, record_id: int) -> None:
        model = self._model(table)
        try:
            async with self.sessionmaker() as session:
                await session.execute(delete(model).where(model.id == record_id))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("repository_call_failed", table=table, error=str(e))
            raise UpstreamRepositoryError(error={"message": str(e)}) from e
