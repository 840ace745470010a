# backend/docchat/core/chunker.py
"""
Line-oriented chunker: greedily packs whole lines into chunks of at most
max_chunk_size characters and seeds each new chunk with the trailing words
of the previous one.

Produces a list of Chunk records: {'id', 'content', 'metadata': {'source', 'start_line', 'end_line'}}
"""
import logging
import math
from typing import List, Tuple

from docchat.core.exceptions import ConfigurationError
from docchat.core.types import Chunk, ChunkMetadata, ChunkOptions

logger = logging.getLogger(__name__)

# rough average word length, turns the character overlap into a word count
CHARS_PER_WORD = 5
PLACEHOLDER_SOURCE = "unknown"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_options(options: ChunkOptions) -> Tuple[int, int]:
    max_chunk_size = options.max_chunk_size
    overlap = options.overlap

    if not _is_number(max_chunk_size) or not max_chunk_size > 0:
        raise ConfigurationError("maxChunkSize must be a positive number", option="max_chunk_size")
    if not _is_number(overlap) or not overlap >= 0:
        raise ConfigurationError("overlap must be a non-negative number", option="overlap")
    if not overlap < max_chunk_size:
        raise ConfigurationError("overlap must be less than maxChunkSize", option="overlap")
    return max_chunk_size, overlap


def _emit(chunks: List[Chunk], buffer: str, start_line: int, end_line: int) -> None:
    content = buffer.strip()
    if not content:
        return
    chunks.append(Chunk(
        id=f"chunk-{len(chunks)}",
        content=content,
        metadata=ChunkMetadata(source=PLACEHOLDER_SOURCE, start_line=start_line, end_line=end_line),
    ))


def chunk_text(text: str, options: ChunkOptions) -> List[Chunk]:
    """
    Split text into bounded, overlapping chunks annotated with 1-based line ranges.

    A line is never split: the size bound only decides when the current chunk
    is closed, so one oversized line still ends up whole in a single chunk.
    metadata.source is a placeholder; the caller overwrites it.

    Raises:
        TypeError: text is not a str.
        ConfigurationError: invalid max_chunk_size / overlap.
    """
    if not isinstance(text, str):
        raise TypeError("text must be a string")
    if not text.strip():
        return []

    max_chunk_size, overlap = validate_options(options)

    chunks: List[Chunk] = []
    buffer = ""
    start_line = 1
    current_line = 1

    for line in text.split("\n"):
        line_with_newline = line + "\n"

        if buffer and len(buffer) + len(line_with_newline) > max_chunk_size:
            _emit(chunks, buffer, start_line, current_line - 1)

            if overlap > 0:
                words = buffer.split(" ")
                # keep at least one word out of the carry-over
                word_count = min(math.ceil(overlap / CHARS_PER_WORD), len(words) - 1)
                carried = words[len(words) - word_count:] if word_count > 0 else []
                buffer = " ".join(carried) + " "
                start_line = max(1, current_line - len(carried))
            else:
                buffer = ""
                start_line = current_line

        buffer += line_with_newline
        current_line += 1

    if buffer.strip():
        _emit(chunks, buffer, start_line, current_line - 1)

    logger.debug("Chunked %d lines into %d chunks", current_line - 1, len(chunks))
    return chunks
