"""
Shared FastAPI dependencies for the content routes.

Clients are cached per process; catalogs are cheap and built per request.
Tests swap the object store and repository via ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from supabase import Client, create_client

from gsl_cms.core.config import Settings, get_settings
from gsl_cms.core.paths import CategoryFolders
from gsl_cms.models.database import get_engine, make_sessionmaker
from gsl_cms.services.catalog import BannerCatalog, ClientCatalog, ServiceCatalog
from gsl_cms.services.image_service import ImageService
from gsl_cms.services.record_service import (
    RecordRepository,
    SqlRecordRepository,
    SupabaseRecordRepository,
)
from gsl_cms.services.storage_service import ObjectStore, SupabaseObjectStore

AppSettings = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_key)


def get_object_store(settings: AppSettings) -> ObjectStore:
    return SupabaseObjectStore(get_supabase_client(), settings.storage_bucket)


def get_record_repository(settings: AppSettings) -> RecordRepository:
    if settings.record_backend == "sql":
        return SqlRecordRepository(make_sessionmaker(get_engine()))
    return SupabaseRecordRepository(get_supabase_client())


def get_image_service(settings: AppSettings) -> ImageService:
    return ImageService(quality=settings.image_quality)


def get_category_folders(settings: AppSettings) -> CategoryFolders:
    return CategoryFolders(
        folders=settings.service_category_folders,
        default=settings.default_category_folder,
    )


Store = Annotated[ObjectStore, Depends(get_object_store)]
Repository = Annotated[RecordRepository, Depends(get_record_repository)]
Images = Annotated[ImageService, Depends(get_image_service)]


def get_banner_catalog(
    store: Store, repository: Repository, images: Images, settings: AppSettings
) -> BannerCatalog:
    return BannerCatalog(store, repository, images, settings.storage_bucket)


def get_client_catalog(
    store: Store, repository: Repository, images: Images, settings: AppSettings
) -> ClientCatalog:
    return ClientCatalog(store, repository, images, settings.storage_bucket)


def get_service_catalog(
    store: Store,
    repository: Repository,
    images: Images,
    settings: AppSettings,
    category_folders: Annotated[CategoryFolders, Depends(get_category_folders)],
) -> ServiceCatalog:
    return ServiceCatalog(store, repository, images, settings.storage_bucket, category_folders)


Banners = Annotated[BannerCatalog, Depends(get_banner_catalog)]
Clients = Annotated[ClientCatalog, Depends(get_client_catalog)]
Services = Annotated[ServiceCatalog, Depends(get_service_catalog)]
