"""
HTTP routes for the gallery API.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from drivegallery.aggregator import DriveAggregator
from drivegallery.cache import ResourceCache
from drivegallery.dependencies import (
    AppContext,
    get_aggregator,
    get_context,
    get_gallery_cache,
    get_news_cache,
)
from drivegallery.errors import NotFoundError
from drivegallery.schemas import (
    Article,
    ArticleSummary,
    ErrorResponse,
    FolderRecord,
    GalleryRecord,
    HealthResponse,
    ImageRecord,
    ItemResponse,
    ListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def _failure(status_code: int, error: str, exc: Exception) -> JSONResponse:
    payload = ErrorResponse(error=error, message=str(exc))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@router.get(
    "/galleries",
    response_model=ListResponse[GalleryRecord],
    responses=ERROR_RESPONSES,
)
async def list_galleries(
    refresh: bool = Query(False, description="Bypass the cache"),
    cache: ResourceCache = Depends(get_gallery_cache),
):
    """All gallery folders with their images, served from the cache when fresh."""
    try:
        galleries = await cache.get(force_refresh=refresh)
    except Exception as e:
        logger.exception("Error fetching complete gallery")
        return _failure(500, "Failed to fetch galleries", e)
    return ListResponse[GalleryRecord](count=len(galleries), data=galleries)


@router.get(
    "/galleries/{folder_id}",
    response_model=ListResponse[ImageRecord],
    responses=ERROR_RESPONSES,
)
async def list_gallery_images(
    folder_id: str,
    aggregator: DriveAggregator = Depends(get_aggregator),
):
    try:
        images = await aggregator.list_images(folder_id)
    except Exception as e:
        logger.exception("Error fetching images for folder %s", folder_id)
        return _failure(500, "Failed to fetch gallery images", e)
    return ListResponse[ImageRecord](count=len(images), data=images)


@router.get(
    "/folders",
    response_model=ListResponse[FolderRecord],
    responses=ERROR_RESPONSES,
)
async def list_folders(aggregator: DriveAggregator = Depends(get_aggregator)):
    """Folder list only, without images."""
    try:
        folders = await aggregator.list_folders()
    except Exception as e:
        logger.exception("Error fetching gallery folders")
        return _failure(500, "Failed to fetch folders", e)
    return ListResponse[FolderRecord](count=len(folders), data=folders)


@router.get(
    "/news",
    response_model=ListResponse[ArticleSummary],
    responses=ERROR_RESPONSES,
)
async def list_news(
    refresh: bool = Query(False, description="Bypass the cache"),
    cache: ResourceCache = Depends(get_news_cache),
):
    try:
        articles = await cache.get(force_refresh=refresh)
    except Exception as e:
        logger.exception("Error fetching news articles")
        return _failure(500, "Failed to fetch news", e)
    return ListResponse[ArticleSummary](count=len(articles), data=articles)


@router.get(
    "/news/{article_id}",
    response_model=ItemResponse[Article],
    responses={404: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
async def get_news_article(
    article_id: str,
    aggregator: DriveAggregator = Depends(get_aggregator),
):
    try:
        article = await aggregator.get_article(article_id)
    except NotFoundError as e:
        return _failure(404, "Article not found", e)
    except Exception as e:
        logger.exception("Error fetching article %s", article_id)
        return _failure(500, "Failed to fetch article", e)
    return ItemResponse[Article](data=article)


@health_router.get("/health", response_model=HealthResponse)
def health(context: AppContext = Depends(get_context)):
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        cache={
            "galleries": context.gallery_cache.status(),
            "news": context.news_cache.status(),
        },
    )
