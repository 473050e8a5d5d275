"""
Pydantic schemas for the gallery API.

Field names are camelCase because they are serialized to the frontend
as-is, matching the names Drive itself uses. Drive timestamps are passed
through untouched as the RFC 3339 strings Drive returns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class FolderRecord(BaseModel):
    id: str
    name: str
    createdTime: Optional[str] = None
    modifiedTime: Optional[str] = None


class ImageRecord(BaseModel):
    id: str
    name: str
    mimeType: str
    thumbnailLink: Optional[str] = None
    imageUrl: str
    downloadUrl: Optional[str] = None
    createdTime: Optional[str] = None


class GalleryRecord(BaseModel):
    id: str
    name: str
    createdTime: Optional[str] = None
    modifiedTime: Optional[str] = None
    imageCount: int
    images: list[ImageRecord] = Field(default_factory=list)


class ArticleSummary(BaseModel):
    id: str
    title: str
    excerpt: str
    createdTime: Optional[str] = None
    modifiedTime: Optional[str] = None


class Article(BaseModel):
    id: str
    title: str
    content: str
    createdTime: Optional[str] = None
    modifiedTime: Optional[str] = None


class ListResponse(BaseModel, Generic[T]):
    success: Literal[True] = True
    count: int
    data: list[T]


class ItemResponse(BaseModel, Generic[T]):
    success: Literal[True] = True
    data: T


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
    message: str


class CacheStatus(BaseModel):
    cached: bool
    fresh: bool
    lastUpdated: Optional[datetime] = None
    ageSeconds: Optional[float] = None
    count: Optional[int] = None


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: datetime
    cache: dict[str, CacheStatus]
