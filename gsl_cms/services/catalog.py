"""
Record catalogs — the create / list / update / delete pipelines per entity kind.

Each catalog ties the image normaliser, the object store and the record
repository together:

    create:  validate -> to_webp -> upload(upsert) -> public_url -> insert
    delete:  resolve stored URL -> remove object -> delete row
    update:  validate -> [get -> remove old object -> to_webp -> upload] -> patch

Storage and database writes are not atomic. An upload followed by a failed
insert leaves an orphaned object; a failed object removal keeps the row.
"""

from __future__ import annotations

from typing import Any, ClassVar

from starlette.concurrency import run_in_threadpool

from gsl_cms.core.exceptions import (
    CatalogError,
    InvalidUrlError,
    NotFoundError,
    UpstreamRepositoryError,
    ValidationError,
    reported_as,
    server_errors,
)
from gsl_cms.core.logging import get_logger
from gsl_cms.core.paths import CategoryFolders, build_object_path, resolve_object_path
from gsl_cms.services.image_service import WEBP_CONTENT_TYPE, ImageService
from gsl_cms.services.record_service import RecordRepository, Row
from gsl_cms.services.storage_service import ObjectStore

logger = get_logger(__name__)


class ImageRecordCatalog:
    table: ClassVar[str]
    label: ClassVar[str]  # "Banner"
    image_noun: ClassVar[str] = "image"  # what the admin uploads
    url_field: ClassVar[str] = "image_url"
    name_field: ClassVar[str] = "title"  # sanitised into the object name
    required_fields: ClassVar[tuple[str, ...]]
    create_required_message: ClassVar[str]
    update_required_message: ClassVar[str] = ""

    def __init__(
        self,
        store: ObjectStore,
        repository: RecordRepository,
        images: ImageService,
        bucket: str,
    ) -> None:
        self.store = store
        self.repository = repository
        self.images = images
        self.bucket = bucket

    # ── Paths ───────────────────────────────────────────────
    def storage_prefix(self, fields: dict[str, Any]) -> str:
        return self.table

    def object_path(self, fields: dict[str, Any]) -> str:
        return build_object_path(self.storage_prefix(fields), fields[self.name_field])

    # ── Operations ──────────────────────────────────────────
    async def create(self, fields: dict[str, Any], image: bytes | None) -> Row:
        if not self._has_required(fields) or not image:
            raise ValidationError(self.create_required_message)

        with server_errors():
            path = self.object_path(fields)
            url = await self._upload(path, await self._encode(image))

            with reported_as(f"Failed to add {self.label.lower()}"):
                row = await self.repository.insert(
                    self.table, {**self._values(fields), self.url_field: url}
                )

        logger.info(f"{self.label.lower()}_created", id=row.get("id"), path=path)
        return row

    async def list_all(self) -> list[Row]:
        with server_errors(), reported_as(f"Failed to fetch {self.table}"):
            return await self.repository.list_rows(self.table)

    async def delete(self, record_id: int, url: str | None) -> dict[str, str]:
        if not url:
            raise ValidationError(f"{self.image_noun.capitalize()} URL required")

        with server_errors():
            try:
                path = resolve_object_path(url, self.bucket)
            except InvalidUrlError as e:
                e.message = f"Invalid {self.image_noun} URL"
                raise

            with reported_as(f"Failed to delete {self.image_noun}"):
                await self.store.remove([path])

            with reported_as(f"Failed to delete {self.label.lower()}"):
                await self.repository.delete(self.table, record_id)

        logger.info(f"{self.label.lower()}_deleted", id=record_id, path=path)
        return {"message": f"{self.label} deleted successfully"}

    async def update(
        self, record_id: int, fields: dict[str, Any], image: bytes | None = None
    ) -> Row:
        if not self._has_required(fields):
            raise ValidationError(self.update_required_message)

        with server_errors():
            patch = self._values(fields)

            if image:
                existing = await self._get_existing(record_id)
                webp = await self._encode(image)
                if existing.get(self.url_field):
                    await self._remove_previous(existing[self.url_field])
                patch[self.url_field] = await self._upload(self.object_path(fields), webp)

            with reported_as(f"Failed to update {self.label.lower()}"):
                row = await self.repository.update(self.table, record_id, patch)
            if row is None:
                raise NotFoundError(f"{self.label} not found")

        logger.info(
            f"{self.label.lower()}_updated", id=record_id, replaced_image=self.url_field in patch
        )
        return row

    # ── Steps ───────────────────────────────────────────────
    def _has_required(self, fields: dict[str, Any]) -> bool:
        return all(fields.get(name) for name in self.required_fields)

    def _values(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {name: fields[name] for name in self.required_fields}

    async def _encode(self, image: bytes) -> bytes:
        return await run_in_threadpool(self.images.to_webp, image)

    async def _upload(self, path: str, webp: bytes) -> str:
        with reported_as(f"{self.image_noun.capitalize()} upload failed"):
            await self.store.upload(path, webp, WEBP_CONTENT_TYPE, upsert=True)
        return self.store.public_url(path)

    async def _get_existing(self, record_id: int) -> Row:
        try:
            existing = await self.repository.get(self.table, record_id)
        except UpstreamRepositoryError as e:
            raise NotFoundError(f"{self.label} not found", error=e.error) from e
        if existing is None:
            raise NotFoundError(f"{self.label} not found")
        return existing

    async def _remove_previous(self, url: str) -> None:
        """Best effort: a stale object must not block the replacement upload."""
        try:
            await self.store.remove([resolve_object_path(url, self.bucket)])
        except CatalogError as e:
            logger.warning(
                "previous_object_remove_failed", table=self.table, url=url, error=e.error
            )


class BannerCatalog(ImageRecordCatalog):
    table = "banners"
    label = "Banner"
    required_fields = ("title",)
    create_required_message = "Title and image required"


class ClientCatalog(ImageRecordCatalog):
    table = "clients"
    label = "Client"
    image_noun = "logo"
    url_field = "logo_url"
    name_field = "name"
    required_fields = ("name", "website")
    create_required_message = "Name, website, and logo are required"
    update_required_message = "Name and website are required"


class ServiceCatalog(ImageRecordCatalog):
    table = "services"
    label = "Service"
    required_fields = ("category", "title")
    create_required_message = "Category, title, and image are required"
    update_required_message = "Category and title are required"

    def __init__(
        self,
        store: ObjectStore,
        repository: RecordRepository,
        images: ImageService,
        bucket: str,
        category_folders: CategoryFolders,
    ) -> None:
        super().__init__(store, repository, images, bucket)
        self.category_folders = category_folders

    def storage_prefix(self, fields: dict[str, Any]) -> str:
        return f"{self.table}/{self.category_folders.folder_for(fields['category'])}"
