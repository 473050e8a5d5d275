"""
Word document to HTML rendering.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Protocol

import mammoth

from drivegallery.errors import ConversionError


@dataclass
class RenderedDocument:
    html: str
    warnings: list[str] = field(default_factory=list)


class DocumentRenderer(Protocol):
    def render(self, data: bytes) -> RenderedDocument:
        ...


class MammothRenderer:
    """Converts .docx bytes to semantic HTML with mammoth."""

    def render(self, data: bytes) -> RenderedDocument:
        try:
            result = mammoth.convert_to_html(io.BytesIO(data))
        except Exception as e:
            # mammoth surfaces zip, XML and key errors for malformed input.
            raise ConversionError(f"Could not convert document: {e}") from e
        warnings = [f"{message.type}: {message.message}" for message in result.messages]
        return RenderedDocument(html=result.value, warnings=warnings)
