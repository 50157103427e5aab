"""Pydantic schemas for Post."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class PostResponse(BaseModel):
    id: UUID
    title: str
    category: str
    description: str
    thumbnail: str
    thumbnail_url: str | None = None
    creator: UUID
    created_at: datetime
    updated_at: datetime


class PostDeleted(BaseModel):
    message: str
