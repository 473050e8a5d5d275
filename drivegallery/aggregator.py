"""
Read-through aggregation over the Drive file store.

Each pass lists the top-level entries of a folder, fans out one lookup per
entry, and joins the results in listing order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Literal, Optional, TypeVar

from drivegallery.config import ImageUrlStrategy
from drivegallery.drive import (
    DOCUMENT_FIELDS,
    DOCUMENT_MIME_TYPES,
    FOLDER_FIELDS,
    FOLDER_MIME_TYPE,
    IMAGE_FIELDS,
    IMAGE_MIME_PREFIX,
    FileQuery,
    FileStoreClient,
)
from drivegallery.errors import (
    ConfigurationError,
    DriveGalleryError,
    NotFoundError,
    UpstreamFetchError,
    UpstreamListingError,
)
from drivegallery.renderer import DocumentRenderer, RenderedDocument
from drivegallery.schemas import (
    Article,
    ArticleSummary,
    FolderRecord,
    GalleryRecord,
    ImageRecord,
)
from drivegallery.transform import (
    DEFAULT_EXCERPT_LENGTH,
    DEFAULT_THUMBNAIL_SIZE,
    make_excerpt,
    strip_document_extension,
    to_folder_record,
    to_image_record,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")


class DriveAggregator:
    """Builds gallery and news payloads from a `FileStoreClient`."""

    def __init__(
        self,
        client: FileStoreClient,
        renderer: DocumentRenderer,
        *,
        main_folder_id: Optional[str],
        news_folder_id: Optional[str],
        image_url_strategy: ImageUrlStrategy = ImageUrlStrategy.THUMBNAIL,
        thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
        timeout: Optional[float] = None,
        gallery_failure_policy: Literal["skip", "strict"] = "skip",
    ):
        self.client = client
        self.renderer = renderer
        self.main_folder_id = main_folder_id
        self.news_folder_id = news_folder_id
        self.image_url_strategy = image_url_strategy
        self.thumbnail_size = thumbnail_size
        self.excerpt_length = excerpt_length
        self.timeout = timeout
        self.gallery_failure_policy = gallery_failure_policy

    async def _call(
        self,
        func: Callable[..., R],
        *args: Any,
        timeout_error: type[DriveGalleryError],
    ) -> R:
        """Run a blocking client call off the event loop, bounded by the timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise timeout_error(
                f"{getattr(func, '__name__', 'Drive call')} timed out after {self.timeout}s"
            ) from e

    async def _list(self, query: FileQuery) -> list[dict]:
        return await self._call(
            self.client.list_files, query, timeout_error=UpstreamListingError
        )

    async def _render(self, file_id: str) -> RenderedDocument:
        data = await self._call(
            self.client.get_bytes, file_id, timeout_error=UpstreamFetchError
        )
        rendered = await asyncio.to_thread(self.renderer.render, data)
        for warning in rendered.warnings:
            logger.warning("Document %s: %s", file_id, warning)
        return rendered

    # ---- galleries ----

    async def list_folders(self) -> list[FolderRecord]:
        if not self.main_folder_id:
            raise ConfigurationError("MAIN_FOLDER_ID is not configured")
        files = await self._list(
            FileQuery(
                parent_id=self.main_folder_id,
                mime_types=(FOLDER_MIME_TYPE,),
                fields=FOLDER_FIELDS,
                order_by="name",
            )
        )
        return [to_folder_record(file) for file in files]

    async def list_images(self, folder_id: str) -> list[ImageRecord]:
        files = await self._list(
            FileQuery(
                parent_id=folder_id,
                mime_prefix=IMAGE_MIME_PREFIX,
                fields=IMAGE_FIELDS,
                order_by="createdTime desc",
            )
        )
        return [
            to_image_record(file, self.image_url_strategy, self.thumbnail_size)
            for file in files
        ]

    async def list_galleries(self) -> list[GalleryRecord]:
        folders = await self.list_folders()
        strict = self.gallery_failure_policy == "strict"
        # gather() returns results by input position, so folder order holds.
        results = await asyncio.gather(
            *(self.list_images(folder.id) for folder in folders),
            return_exceptions=not strict,
        )

        galleries: list[GalleryRecord] = []
        for folder, images in zip(folders, results):
            if isinstance(images, BaseException):
                if not isinstance(images, DriveGalleryError):
                    raise images
                logger.warning(
                    "Skipping gallery %s (%s): %s", folder.id, folder.name, images
                )
                continue
            galleries.append(
                GalleryRecord(
                    id=folder.id,
                    name=folder.name,
                    createdTime=folder.createdTime,
                    modifiedTime=folder.modifiedTime,
                    imageCount=len(images),
                    images=images,
                )
            )
        return galleries

    # ---- news ----

    async def _list_documents(self) -> list[dict]:
        if not self.news_folder_id:
            raise ConfigurationError("NEWS_FOLDER_ID is not configured")
        return await self._list(
            FileQuery(
                parent_id=self.news_folder_id,
                mime_types=DOCUMENT_MIME_TYPES,
                fields=DOCUMENT_FIELDS,
                order_by="createdTime desc",
            )
        )

    async def _summarize(self, file: dict) -> Optional[ArticleSummary]:
        try:
            rendered = await self._render(file["id"])
        except DriveGalleryError as e:
            logger.warning("Dropping article %s (%s): %s", file["id"], file.get("name"), e)
            return None
        return ArticleSummary(
            id=file["id"],
            title=strip_document_extension(file["name"]),
            excerpt=make_excerpt(rendered.html, self.excerpt_length),
            createdTime=file.get("createdTime"),
            modifiedTime=file.get("modifiedTime"),
        )

    async def list_articles(self) -> list[ArticleSummary]:
        files = await self._list_documents()
        summaries = await asyncio.gather(*(self._summarize(file) for file in files))
        return [summary for summary in summaries if summary is not None]

    async def get_article(self, article_id: str) -> Article:
        files = await self._list_documents()
        file = next((f for f in files if f["id"] == article_id), None)
        if file is None:
            raise NotFoundError(f"Article {article_id} not found")
        rendered = await self._render(file["id"])
        return Article(
            id=file["id"],
            title=strip_document_extension(file["name"]),
            content=rendered.html,
            createdTime=file.get("createdTime"),
            modifiedTime=file.get("modifiedTime"),
        )
