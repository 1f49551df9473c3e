"""
Pydantic v2 schemas for API request/response validation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# ── Records ─────────────────────────────────────────────────
class BannerRecord(BaseModel):
    id: int
    title: str
    image_url: str | None = None
    created_at: datetime | None = None


class ClientRecord(BaseModel):
    id: int
    name: str
    website: str | None = None
    logo_url: str | None = None
    created_at: datetime | None = None


class ServiceRecord(BaseModel):
    id: int
    category: str
    title: str
    image_url: str | None = None
    created_at: datetime | None = None


# ── Delete bodies ───────────────────────────────────────────
# Optional so a missing URL gets the API's own 400 message instead of a 422
class ImageUrlBody(BaseModel):
    image_url: str | None = None


class LogoUrlBody(BaseModel):
    logo_url: str | None = None


# ── Generic responses ───────────────────────────────────────
class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    message: str
    error: dict | str | None = None


ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ── Health check ────────────────────────────────────────────
class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str = "0.1.0"
    environment: str
    record_backend: str
