"""
Dependency wiring for the FastAPI app.

The caches and the aggregator live on an `AppContext` owned by the
application (`app.state.context`), so each app instance, including each
test client, gets its own cache state.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request

from drivegallery.aggregator import DriveAggregator
from drivegallery.cache import ResourceCache
from drivegallery.config import Settings
from drivegallery.drive import FileStoreClient, GoogleDriveClient, InMemoryDriveClient
from drivegallery.renderer import DocumentRenderer, MammothRenderer
from drivegallery.schemas import ArticleSummary, GalleryRecord

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    aggregator: DriveAggregator
    gallery_cache: ResourceCache[list[GalleryRecord]]
    news_cache: ResourceCache[list[ArticleSummary]]


def build_drive_client(settings: Settings) -> FileStoreClient:
    if settings.use_in_memory_backends:
        logger.info("USE_IN_MEMORY_BACKENDS is set; using in-memory file store")
        return InMemoryDriveClient()
    if not settings.refresh_token:
        logger.warning("No Drive refresh token configured; using in-memory file store")
        return InMemoryDriveClient()
    return GoogleDriveClient(
        client_id=settings.client_id or "",
        client_secret=settings.client_secret or "",
        refresh_token=settings.refresh_token,
        timeout=settings.upstream_timeout_seconds,
    )


def build_context(
    settings: Settings,
    *,
    drive_client: Optional[FileStoreClient] = None,
    renderer: Optional[DocumentRenderer] = None,
    clock: Callable[[], float] = time.time,
) -> AppContext:
    aggregator = DriveAggregator(
        drive_client if drive_client is not None else build_drive_client(settings),
        renderer if renderer is not None else MammothRenderer(),
        main_folder_id=settings.main_folder_id,
        news_folder_id=settings.news_folder_id,
        image_url_strategy=settings.image_url_strategy,
        thumbnail_size=settings.thumbnail_size,
        excerpt_length=settings.excerpt_length,
        timeout=settings.upstream_timeout_seconds,
        gallery_failure_policy=settings.gallery_failure_policy,
    )
    return AppContext(
        settings=settings,
        aggregator=aggregator,
        gallery_cache=ResourceCache(
            "galleries",
            aggregator.list_galleries,
            ttl_seconds=settings.cache_ttl_seconds,
            clock=clock,
        ),
        news_cache=ResourceCache(
            "news",
            aggregator.list_articles,
            ttl_seconds=settings.cache_ttl_seconds,
            clock=clock,
        ),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_aggregator(request: Request) -> DriveAggregator:
    return get_context(request).aggregator


def get_gallery_cache(request: Request) -> ResourceCache[list[GalleryRecord]]:
    return get_context(request).gallery_cache


def get_news_cache(request: Request) -> ResourceCache[list[ArticleSummary]]:
    return get_context(request).news_cache
