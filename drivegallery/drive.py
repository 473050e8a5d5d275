"""
File store abstraction for Google Drive and an in-memory test implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import google_auth_httplib2
import httplib2
from google.auth import exceptions as google_auth_exceptions
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from drivegallery.errors import UpstreamFetchError, UpstreamListingError

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DOCUMENT_MIME_TYPES = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
)
IMAGE_MIME_PREFIX = "image/"

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

FOLDER_FIELDS = ("id", "name", "createdTime", "modifiedTime")
IMAGE_FIELDS = (
    "id",
    "name",
    "mimeType",
    "thumbnailLink",
    "webViewLink",
    "webContentLink",
    "createdTime",
)
DOCUMENT_FIELDS = ("id", "name", "mimeType", "createdTime", "modifiedTime")

Record = dict[str, Any]


def _quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


@dataclass(frozen=True)
class FileQuery:
    """
    A child listing of one Drive folder.

    Renders to a Drive `q` expression and can also test a raw record, so the
    in-memory client applies exactly the same filter as the real API.
    """

    parent_id: str
    mime_types: tuple[str, ...] = ()
    mime_prefix: Optional[str] = None
    fields: tuple[str, ...] = ("id", "name")
    order_by: str = "name"

    def to_drive_query(self) -> str:
        clauses = [f"{_quote(self.parent_id)} in parents"]
        if self.mime_types:
            mime_clause = " or ".join(
                f"mimeType={_quote(mime_type)}" for mime_type in self.mime_types
            )
            clauses.append(
                f"({mime_clause})" if len(self.mime_types) > 1 else mime_clause
            )
        if self.mime_prefix:
            clauses.append(f"(mimeType contains {_quote(self.mime_prefix)})")
        clauses.append("trashed=false")
        return " and ".join(clauses)

    def fields_mask(self) -> str:
        return f"files({', '.join(self.fields)})"

    def matches(self, record: Record) -> bool:
        if record.get("trashed"):
            return False
        mime_type = record.get("mimeType", "")
        if self.mime_types and mime_type not in self.mime_types:
            return False
        if self.mime_prefix and self.mime_prefix not in mime_type:
            return False
        return True

    def sort(self, records: list[Record]) -> list[Record]:
        """Order records the way Drive applies `order_by`."""
        ordered = list(records)
        # Apply keys right to left so the first key wins.
        for part in reversed(self.order_by.split(",")):
            tokens = part.split()
            if not tokens:
                continue
            key = tokens[0]
            descending = len(tokens) > 1 and tokens[1].lower() == "desc"
            ordered.sort(key=lambda r: str(r.get(key) or ""), reverse=descending)
        return ordered


class FileStoreClient(Protocol):
    """Defines the operations the aggregator needs from the file store."""

    def list_files(self, query: FileQuery) -> list[Record]:
        ...

    def get_bytes(self, file_id: str) -> bytes:
        ...


@dataclass
class InMemoryDriveClient:
    """Test double for Drive interactions."""

    children: dict[str, list[Record]] = field(default_factory=dict)
    contents: dict[str, bytes] = field(default_factory=dict)
    failing_ids: set[str] = field(default_factory=set)
    list_calls: list[FileQuery] = field(default_factory=list)
    fetch_calls: list[str] = field(default_factory=list)

    def add_file(self, parent_id: str, record: Record, content: bytes | None = None) -> None:
        self.children.setdefault(parent_id, []).append(record)
        if content is not None:
            self.contents[record["id"]] = content

    def list_files(self, query: FileQuery) -> list[Record]:
        self.list_calls.append(query)
        if query.parent_id in self.failing_ids:
            raise UpstreamListingError(f"Listing failed for folder {query.parent_id}")
        matching = [
            record
            for record in self.children.get(query.parent_id, [])
            if query.matches(record)
        ]
        return [
            {k: v for k, v in record.items() if k in query.fields}
            for record in query.sort(matching)
        ]

    def get_bytes(self, file_id: str) -> bytes:
        self.fetch_calls.append(file_id)
        if file_id in self.failing_ids:
            raise UpstreamFetchError(f"Download failed for file {file_id}")
        content = self.contents.get(file_id)
        if content is None:
            raise UpstreamFetchError(f"File {file_id} has no content")
        return content

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.children.clear()
        self.contents.clear()
        self.failing_ids.clear()
        self.list_calls.clear()
        self.fetch_calls.clear()


# Transport and auth failures common to every Drive call.
TRANSPORT_ERRORS = (
    HttpError,
    httplib2.HttpLib2Error,
    google_auth_exceptions.GoogleAuthError,
    OSError,
)
# Drive folders holding more children than this are truncated.
PAGE_SIZE = 1000


@dataclass
class GoogleDriveClient:
    """
    Drive v3 client authorised with a long-lived offline refresh token.

    `http_factory` replaces the per-call authorised transport, which lets
    tests plug in `googleapiclient.http.HttpMockSequence`.
    """

    client_id: str
    client_secret: str
    refresh_token: str
    timeout: float = 30
    http_factory: Optional[Callable[[], httplib2.Http]] = field(default=None, repr=False)

    def __post_init__(self):
        self._credentials = Credentials(
            token=None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=TOKEN_URI,
            scopes=DRIVE_SCOPES,
        )
        self._service = build(
            "drive", "v3", credentials=self._credentials, cache_discovery=False
        )

    def _http(self) -> httplib2.Http:
        if self.http_factory is not None:
            return self.http_factory()
        # httplib2.Http is not thread-safe, so every call gets its own.
        return google_auth_httplib2.AuthorizedHttp(
            self._credentials, http=httplib2.Http(timeout=self.timeout)
        )

    def list_files(self, query: FileQuery) -> list[Record]:
        request = self._service.files().list(
            q=query.to_drive_query(),
            fields=query.fields_mask(),
            orderBy=query.order_by,
            pageSize=PAGE_SIZE,
        )
        try:
            response = request.execute(http=self._http())
        except (*TRANSPORT_ERRORS, ValueError) as e:
            # ValueError: the response body was not valid JSON.
            raise UpstreamListingError(
                f"Drive listing failed for folder {query.parent_id}: {e}"
            ) from e
        return response.get("files", [])

    def get_bytes(self, file_id: str) -> bytes:
        request = self._service.files().get_media(fileId=file_id)
        try:
            return request.execute(http=self._http())
        except TRANSPORT_ERRORS as e:
            raise UpstreamFetchError(f"Drive download failed for file {file_id}: {e}") from e
