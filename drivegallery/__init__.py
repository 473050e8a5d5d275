"""
Drive-backed gallery and news API.

This package exposes a Google Drive folder hierarchy as a small JSON API:
image galleries built from sub-folders of a root folder, and news articles
rendered from Word documents, with a short-lived in-memory cache in front
of the aggregation passes.
"""
