"""
Shared test fixtures and fakes.

Provides: deterministic keyword embedder, in-memory vector store, scripted chat
client, RAG pipeline wired from those fakes, FastAPI test client.
Dependencies: pytest, numpy, fastapi.testclient
"""

from typing import List

import numpy as np
import pytest
from fastapi.testclient import TestClient

from docchat.core.rag import RAGPipeline
from docchat.core.types import ChunkOptions, SearchResult
from docchat.core.vector_store import VectorStore

VOCABULARY = ["apple", "banana", "cherry", "docker", "python", "rust"]


class KeywordEmbedder:
    """Counts vocabulary words; the last dimension is a constant so no vector is zero."""

    def __init__(self):
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> np.ndarray:
        words = text.lower().split()
        counts = [sum(1 for w in words if w.strip(".,!?") == term) for term in VOCABULARY]
        return np.asarray(counts + [0.1], dtype="float32")

    def embed_text(self, text: str) -> np.ndarray:
        return self._vector(text)

    def embed_texts(self, texts: List[str]) -> np.ndarray:
        self.calls.append(list(texts))
        return np.stack([self._vector(t) for t in texts])


class InMemoryStore(VectorStore):
    def __init__(self):
        self.chunks = []
        self.embeddings = []

    def store(self, chunks, embeddings):
        self.chunks.extend(chunks)
        self.embeddings.extend(embeddings)

    def search(self, query_embedding, k=5):
        return [SearchResult(chunk=c, score=1.0) for c in self.chunks[:k]]


class ScriptedChatClient:
    def __init__(self, reply: str = "Grounded answer."):
        self.reply = reply
        self.calls = []

    def generate(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        return self.reply


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def chat_client():
    return ScriptedChatClient()


@pytest.fixture
def pipeline(embedder, memory_store, chat_client):
    return RAGPipeline(
        embed_model=embedder,
        store=memory_store,
        chat_client=chat_client,
        chunk_options=ChunkOptions(max_chunk_size=500, overlap=50),
    )


@pytest.fixture
def client(pipeline):
    from docchat.main import create_app

    app = create_app(pipeline=pipeline, max_upload_bytes=1024)
    return TestClient(app)
