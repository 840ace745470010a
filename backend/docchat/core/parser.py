# backend/docchat/core/parser.py
"""
Text extraction for uploaded markdown / plain-text files.
Produces a ParseResult: {'content', 'metadata': {'source', 'line_count'}}
"""
import logging
from pathlib import PurePath
from typing import Optional

from docchat.core.exceptions import ParsingError
from docchat.core.types import ParseResult

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".md", ".txt", ".markdown", ".text")
SUPPORTED_MIME_TYPES = ("text/markdown", "text/plain", "text/x-markdown")


def is_allowed_filename(filename: str) -> bool:
    if not filename or not isinstance(filename, str):
        return False
    return PurePath(filename.strip()).suffix.lower() in ALLOWED_EXTENSIONS


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        # not UTF-8: latin-1 maps every byte, so this never fails
        return data.decode("latin-1")


def extract_text(filename: str, data: bytes, content_type: Optional[str] = None) -> ParseResult:
    """
    Decode an uploaded file into text plus source metadata.

    The MIME type is only a secondary check since browsers report it
    inconsistently; the extension is authoritative.
    """
    if not filename or not filename.strip():
        raise ParsingError("File name cannot be empty")

    if not is_allowed_filename(filename):
        raise ParsingError(
            f"Unsupported file extension. Allowed: {', '.join(ALLOWED_EXTENSIONS)}",
            filename=filename,
        )

    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime and mime not in SUPPORTED_MIME_TYPES:
        raise ParsingError(f"Unsupported file type: {content_type}", filename=filename)

    content = _decode(data or b"")
    if not content.strip():
        logger.info("File %s has no text content", filename)
        return ParseResult(content="", metadata={"source": filename, "line_count": 0})

    return ParseResult(
        content=content,
        metadata={"source": filename, "line_count": len(content.split("\n"))},
    )
