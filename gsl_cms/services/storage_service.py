"""
Object store gateway over a single Supabase Storage bucket.

The supabase client is synchronous, so every remote call is pushed to the
thread pool and the request handler suspends until it returns.
"""

from __future__ import annotations

from typing import Protocol

from starlette.concurrency import run_in_threadpool
from supabase import Client

from gsl_cms.core.exceptions import UpstreamStorageError, error_payload
from gsl_cms.core.logging import get_logger

logger = get_logger(__name__)


class ObjectStore(Protocol):
    async def upload(
        self, path: str, data: bytes, content_type: str, upsert: bool = True
    ) -> None: ...

    async def remove(self, paths: list[str]) -> None: ...

    def public_url(self, path: str) -> str: ...


class SupabaseObjectStore:
    def __init__(self, client: Client, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    async def upload(
        self, path: str, data: bytes, content_type: str, upsert: bool = True
    ) -> None:
        file_options = {"content-type": content_type, "upsert": "true" if upsert else "false"}
        try:
            await run_in_threadpool(self._bucket().upload, path, data, file_options)
        except Exception as e:
            logger.error("object_upload_failed", bucket=self.bucket, path=path, error=str(e))
            raise UpstreamStorageError(error=error_payload(e)) from e
        logger.info("object_uploaded", bucket=self.bucket, path=path, size=len(data))

    async def remove(self, paths: list[str]) -> None:
        try:
            await run_in_threadpool(self._bucket().remove, paths)
        except Exception as e:
            logger.error("object_remove_failed", bucket=self.bucket, paths=paths, error=str(e))
            raise UpstreamStorageError(error=error_payload(e)) from e
        logger.info("objects_removed", bucket=self.bucket, paths=paths)

    def public_url(self, path: str) -> str:
        """Deterministic URL, no network round trip."""
        # some storage3 releases append a bare "?" when no transform is requested
        return self._bucket().get_public_url(path).rstrip("?")
