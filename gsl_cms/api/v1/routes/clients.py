"""
Client endpoints.

POST   /clients       — upload a logo and create the client
GET    /clients       — list clients, newest first
DELETE /clients/{id}  — remove the stored logo, then the row
PUT    /clients/{id}  — edit name/website, optionally replacing the logo
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from gsl_cms.api.v1.deps import Clients
from gsl_cms.schemas.schemas import (
    ERROR_RESPONSES,
    ClientRecord,
    LogoUrlBody,
    MessageResponse,
)

router = APIRouter(prefix="/clients", tags=["clients"], responses=ERROR_RESPONSES)


@router.post("", response_model=ClientRecord)
async def create_client(
    catalog: Clients,
    name: Annotated[str | None, Form()] = None,
    website: Annotated[str | None, Form()] = None,
    logo: Annotated[UploadFile | None, File()] = None,
) -> dict:
    data = await logo.read() if logo else None
    return await catalog.create({"name": name, "website": website}, data)


@router.get("", response_model=list[ClientRecord])
async def list_clients(catalog: Clients) -> list[dict]:
    return await catalog.list_all()


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_client(
    record_id: int, catalog: Clients, body: LogoUrlBody | None = None
) -> dict:
    return await catalog.delete(record_id, body.logo_url if body else None)


@router.put("/{record_id}", response_model=ClientRecord)
async def update_client(
    record_id: int,
    catalog: Clients,
    name: Annotated[str | None, Form()] = None,
    website: Annotated[str | None, Form()] = None,
    logo: Annotated[UploadFile | None, File()] = None,
) -> dict:
    data = await logo.read() if logo else None
    return await catalog.update(record_id, {"name": name, "website": website}, data)
