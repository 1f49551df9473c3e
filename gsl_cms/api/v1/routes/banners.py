"""
Banner endpoints.

POST   /banners       — upload a banner image and create the row
GET    /banners       — list banners, newest first
DELETE /banners/{id}  — remove the stored image, then the row
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from gsl_cms.api.v1.deps import Banners
from gsl_cms.schemas.schemas import (
    ERROR_RESPONSES,
    BannerRecord,
    ImageUrlBody,
    MessageResponse,
)

router = APIRouter(prefix="/banners", tags=["banners"], responses=ERROR_RESPONSES)


@router.post("", response_model=BannerRecord)
async def create_banner(
    catalog: Banners,
    title: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> dict:
    data = await image.read() if image else None
    return await catalog.create({"title": title}, data)


@router.get("", response_model=list[BannerRecord])
async def list_banners(catalog: Banners) -> list[dict]:
    return await catalog.list_all()


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_banner(
    record_id: int, catalog: Banners, body: ImageUrlBody | None = None
) -> dict:
    return await catalog.delete(record_id, body.image_url if body else None)
