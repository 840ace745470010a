# backend/docchat/core/faiss_store.py
import logging
import os
import threading
from pathlib import Path
from typing import List, Sequence

import faiss
import numpy as np

from docchat.core.config import settings
from docchat.core.exceptions import VectorStoreError
from docchat.core.types import Chunk, SearchResult
from docchat.core.vector_store import VectorStore
from docchat.utils import save_json, load_json, normalize_vectors

logger = logging.getLogger(__name__)

MAX_RESULTS = 100


class FaissStore(VectorStore):
    def __init__(self, index_path: str = None, metadata_path: str = None):
        self.index_path = index_path or settings.FAISS_INDEX_PATH
        self.metadata_path = metadata_path or settings.METADATA_PATH
        self.index = None
        self.records = []  # position = faiss internal id; {'id', 'content', 'metadata'}
        self.dim = None
        self._lock = threading.Lock()
        self.load()

    def create_index(self, dim: int):
        """
        IndexFlatIP on normalized vectors gives cosine similarity.
        """
        self.dim = dim
        self.index = faiss.IndexFlatIP(dim)

    def count(self) -> int:
        return 0 if self.index is None else int(self.index.ntotal)

    def store(self, chunks: List[Chunk], embeddings: Sequence[Sequence[float]]) -> None:
        """
        chunks: list of Chunk, length n
        embeddings: (n, dim) vectors aligned with chunks
        """
        if not chunks:
            raise VectorStoreError("chunks must be a non-empty list", operation="store")
        if embeddings is None or len(embeddings) == 0:
            raise VectorStoreError("embeddings must be a non-empty list", operation="store")
        if len(chunks) != len(embeddings):
            raise VectorStoreError(
                f"Mismatch: {len(chunks)} chunks but {len(embeddings)} embeddings", operation="store"
            )

        for i, chunk in enumerate(chunks):
            if not chunk.id:
                raise VectorStoreError(f"Chunk at index {i}: invalid or missing id", operation="store")
            if not chunk.content:
                raise VectorStoreError(f"Chunk at index {i}: invalid or missing content", operation="store")
            if len(embeddings[i]) == 0:
                raise VectorStoreError(f"Embedding at index {i}: cannot be empty", operation="store")

        try:
            vectors = np.asarray(embeddings, dtype="float32")
        except ValueError as e:
            raise VectorStoreError(f"Embeddings must share one dimension: {e}", operation="store") from e
        if vectors.ndim != 2:
            raise VectorStoreError("Embeddings must be a 2-D array", operation="store")

        with self._lock:
            created = self.index is None
            if created:
                self.create_index(vectors.shape[1])
            elif vectors.shape[1] != self.dim:
                raise VectorStoreError(
                    f"Embedding dimension {vectors.shape[1]} does not match index dimension {self.dim}",
                    operation="store",
                )
            previous = self.count()
            self.index.add(normalize_vectors(vectors))
            self.records.extend(chunk.model_dump() for chunk in chunks)
            try:
                self._persist()
            except (OSError, RuntimeError) as e:
                # a batch is either searchable and on disk, or neither
                self._truncate(previous)
                if created:
                    self.index = None
                    self.dim = None
                raise VectorStoreError(f"Failed to persist index: {e}", operation="store") from e
        logger.info("Stored %d chunks (index size %d)", len(chunks), self.count())

    def search(self, query_embedding: Sequence[float], k: int = 5) -> List[SearchResult]:
        if query_embedding is None or len(query_embedding) == 0:
            raise VectorStoreError("query_embedding must be a non-empty vector", operation="search")
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise VectorStoreError("k must be a positive integer", operation="search")
        if k > MAX_RESULTS:
            raise VectorStoreError(f"k cannot exceed {MAX_RESULTS}", operation="search")

        with self._lock:
            if self.index is None or self.index.ntotal == 0:
                return []
            q = np.asarray(query_embedding, dtype="float32").reshape(1, -1)
            if q.shape[1] != self.dim:
                raise VectorStoreError(
                    f"Query dimension {q.shape[1]} does not match index dimension {self.dim}",
                    operation="search",
                )
            scores, ids = self.index.search(normalize_vectors(q), min(k, self.index.ntotal))
            records = list(self.records)

        results = []
        for score, idx in zip(scores[0], ids[0]):
            if idx < 0 or idx >= len(records):
                continue
            results.append(SearchResult(chunk=Chunk(**records[idx]), score=float(score)))
        return results

    def _truncate(self, n: int):
        """Drop every vector and record past position n."""
        if self.index is not None and self.index.ntotal > n:
            self.index.remove_ids(np.arange(n, self.index.ntotal, dtype="int64"))
        del self.records[n:]

    def _persist(self):
        """
        Index first, then metadata. Both go through <path>.tmp + os.replace,
        so a crash leaves at worst an index that is ahead of its metadata.
        """
        index_path = Path(self.index_path)
        index_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = index_path.with_suffix(index_path.suffix + ".tmp")
        # faiss.write_index expects a filesystem path string
        faiss.write_index(self.index, str(tmp))
        os.replace(tmp, index_path)
        save_json(self.records, self.metadata_path)

    def load(self):
        try:
            self.records = load_json(self.metadata_path)
        except FileNotFoundError:
            self.records = []
        if Path(self.index_path).exists():
            self.index = faiss.read_index(str(self.index_path))
            self.dim = self.index.d
        else:
            self.index = None
        if self.count() != len(self.records):
            # appends only ever grow both sides, so the shorter one is the last consistent state
            keep = min(self.count(), len(self.records))
            logger.warning(
                "Index holds %d vectors but metadata has %d records; keeping the first %d",
                self.count(), len(self.records), keep,
            )
            self._truncate(keep)
