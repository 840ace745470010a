# backend/docchat/core/embeddings.py
"""
Embeddings wrapper using sentence-transformers.
If no model name is given, fall back to settings.EMBEDDING_MODEL, then 'all-MiniLM-L6-v2'.
"""
import logging
from typing import List

import numpy as np

from docchat.core.config import settings
from docchat.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = settings.EMBEDDING_MODEL or "all-MiniLM-L6-v2"


class EmbeddingModel:
    def __init__(self, model_name: str = ""):
        self.model_name = (model_name or "").strip() or DEFAULT_EMBEDDING_MODEL
        self.model = None
        self._load_model()

    def _load_model(self):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "sentence-transformers is not installed in this environment. "
                "Run: pip install sentence-transformers\nOriginal error: " + str(e)
            ) from e

        try:
            # downloads the model on first run if not cached
            self.model = SentenceTransformer(self.model_name)
        except Exception as e:
            raise EmbeddingError(
                f"Failed to load SentenceTransformer model '{self.model_name}'. "
                f"Make sure the model name is correct and dependencies (transformers, torch) are installed. "
                f"Original error: {e}",
                details={"model": self.model_name},
            ) from e
        logger.info("Loaded embedding model %s", self.model_name)

    def embed_text(self, text: str) -> np.ndarray:
        """
        Embed a single text -> 1-D numpy vector.
        """
        if not isinstance(text, str) or not text.strip():
            raise EmbeddingError("Text cannot be empty or whitespace only")
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: List[str]) -> np.ndarray:
        """
        Embed a list of texts -> (n, dim) float32 array, one row per text, same order.
        """
        if not self.model:
            raise EmbeddingError("Embedding model not loaded.")
        if not texts:
            return np.zeros((0, 0), dtype="float32")
        for text in texts:
            if not isinstance(text, str) or not text.strip():
                raise EmbeddingError("All texts must be non-empty strings")

        try:
            vectors = self.model.encode(texts, convert_to_numpy=True, show_progress_bar=False)
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embeddings: {e}", details={"model": self.model_name}) from e

        vectors = np.asarray(vectors, dtype="float32")
        if vectors.ndim != 2 or vectors.shape[0] != len(texts):
            got = vectors.shape[0] if vectors.ndim else 0
            raise EmbeddingError(f"Embedding count mismatch: expected {len(texts)}, got {got}")
        return vectors
