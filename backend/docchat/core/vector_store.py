# backend/docchat/core/vector_store.py
"""Vector store interface.

A vector store is responsible for:
  - Storing chunks (id + content + metadata) paired with their embeddings
  - Searching for the chunks nearest to a query embedding
"""
from typing import List, Sequence

from docchat.core.types import Chunk, SearchResult


class VectorStore:
    """Vector store interface."""

    def store(self, chunks: List[Chunk], embeddings: Sequence[Sequence[float]]) -> None:
        """Persist chunks with their embeddings.

        Args:
            chunks: Ordered chunks; chunks[i] pairs with embeddings[i].
            embeddings: One vector per chunk.
        """
        raise NotImplementedError

    def search(self, query_embedding: Sequence[float], k: int = 5) -> List[SearchResult]:
        """Return up to k chunks ranked by similarity to query_embedding, best first."""
        raise NotImplementedError
