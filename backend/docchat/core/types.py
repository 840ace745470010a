# backend/docchat/core/types.py
"""
Domain records shared by the chunker, the vector store and the API.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ChunkOptions:
    """Size bound and overlap (both in characters) for a single chunk_text call."""
    max_chunk_size: int
    overlap: int


class ChunkMetadata(BaseModel):
    # open map: callers may attach extra keys
    model_config = ConfigDict(extra="allow")

    source: str = "unknown"
    start_line: int
    end_line: int


class Chunk(BaseModel):
    id: str
    content: str
    metadata: ChunkMetadata


class SearchResult(BaseModel):
    chunk: Chunk
    score: float


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    sources: Optional[List[Chunk]] = None


class ParseResult(BaseModel):
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
