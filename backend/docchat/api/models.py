# models.py
from pydantic import BaseModel, Field
from typing import List

from docchat.core.types import ChatMessage, Chunk


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    sources: List[Chunk]


class IngestResponse(BaseModel):
    success: bool
    chunk_count: int
