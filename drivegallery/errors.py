"""
Error types raised by the Drive client, renderer and aggregator.
"""

from __future__ import annotations


class DriveGalleryError(Exception):
    """Base class for failures surfaced to API callers."""


class ConfigurationError(DriveGalleryError):
    """A required setting (usually a folder id) is missing."""


class UpstreamListingError(DriveGalleryError):
    """Listing children of a Drive folder failed."""


class UpstreamFetchError(DriveGalleryError):
    """Downloading a file's content failed."""


class ConversionError(DriveGalleryError):
    """A document could not be rendered to HTML."""


class NotFoundError(DriveGalleryError):
    """The requested item is not present in the current listing."""
