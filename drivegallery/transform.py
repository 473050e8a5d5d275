"""
Mapping helpers from raw Drive records to API records.

Everything here is pure: no I/O and no error handling of its own.
"""

from __future__ import annotations

import re
from typing import Any

from drivegallery.config import ImageUrlStrategy
from drivegallery.schemas import FolderRecord, ImageRecord

DEFAULT_EXCERPT_LENGTH = 200
DEFAULT_THUMBNAIL_SIZE = 1600
ELLIPSIS = "..."

TAG_PATTERN = re.compile(r"<[^>]*>")
DOCUMENT_EXTENSION_PATTERN = re.compile(r"\.docx?$", re.IGNORECASE)
THUMBNAIL_SIZE_PATTERN = re.compile(r"=s\d+$")


def make_excerpt(html: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    text = TAG_PATTERN.sub("", html or "").strip()
    if len(text) > max_length:
        return text[:max_length] + ELLIPSIS
    return text


def strip_document_extension(name: str) -> str:
    return DOCUMENT_EXTENSION_PATTERN.sub("", name)


def direct_view_url(file_id: str) -> str:
    return f"https://drive.google.com/uc?export=view&id={file_id}"


def resize_thumbnail_link(link: str, size: int = DEFAULT_THUMBNAIL_SIZE) -> str:
    """
    Swap the trailing `=s<N>` size hint of a Drive thumbnail link.

    Links without the hint are returned unchanged.
    """
    return THUMBNAIL_SIZE_PATTERN.sub(f"=s{size}", link)


def image_url_for(
    file: dict[str, Any],
    strategy: ImageUrlStrategy = ImageUrlStrategy.THUMBNAIL,
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
) -> str:
    thumbnail_link = file.get("thumbnailLink")
    if strategy == ImageUrlStrategy.THUMBNAIL and thumbnail_link:
        return resize_thumbnail_link(thumbnail_link, thumbnail_size)
    return direct_view_url(file["id"])


def to_folder_record(file: dict[str, Any]) -> FolderRecord:
    return FolderRecord(
        id=file["id"],
        name=file["name"],
        createdTime=file.get("createdTime"),
        modifiedTime=file.get("modifiedTime"),
    )


def to_image_record(
    file: dict[str, Any],
    strategy: ImageUrlStrategy = ImageUrlStrategy.THUMBNAIL,
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
) -> ImageRecord:
    return ImageRecord(
        id=file["id"],
        name=file["name"],
        mimeType=file.get("mimeType", ""),
        thumbnailLink=file.get("thumbnailLink"),
        imageUrl=image_url_for(file, strategy, thumbnail_size),
        downloadUrl=file.get("webContentLink"),
        createdTime=file.get("createdTime"),
    )
