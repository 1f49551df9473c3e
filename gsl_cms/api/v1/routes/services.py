"""
Service endpoints.

Images are filed per category folder (Knit Showroom -> services/ks/...),
unknown categories land in services/others/.

POST   /services       — upload an image and create the service
GET    /services       — list services, newest first
DELETE /services/{id}  — remove the stored image, then the row
PUT    /services/{id}  — edit category/title, optionally replacing the image
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from gsl_cms.api.v1.deps import Services
from gsl_cms.schemas.schemas import (
    ERROR_RESPONSES,
    ImageUrlBody,
    MessageResponse,
    ServiceRecord,
)

router = APIRouter(prefix="/services", tags=["services"], responses=ERROR_RESPONSES)


@router.post("", response_model=ServiceRecord)
async def create_service(
    catalog: Services,
    category: Annotated[str | None, Form()] = None,
    title: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> dict:
    data = await image.read() if image else None
    return await catalog.create({"category": category, "title": title}, data)


@router.get("", response_model=list[ServiceRecord])
async def list_services(catalog: Services) -> list[dict]:
    return await catalog.list_all()


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_service(
    record_id: int, catalog: Services, body: ImageUrlBody | None = None
) -> dict:
    return await catalog.delete(record_id, body.image_url if body else None)


@router.put("/{record_id}", response_model=ServiceRecord)
async def update_service(
    record_id: int,
    catalog: Services,
    category: Annotated[str | None, Form()] = None,
    title: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> dict:
    data = await image.read() if image else None
    return await catalog.update(record_id, {"category": category, "title": title}, data)
