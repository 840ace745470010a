# backend/docchat/api/deps.py
"""
Pipeline wiring for the HTTP layer.

The app factory may receive a ready RAGPipeline (tests, embedding in another
service); otherwise one is built from settings on first request and kept on
app.state for the lifetime of the app.
"""
import logging
import threading

from fastapi import Request

from docchat.core.config import Settings, settings
from docchat.core.rag import RAGPipeline

logger = logging.getLogger(__name__)

_build_lock = threading.Lock()


def build_pipeline(cfg: Settings = settings) -> RAGPipeline:
    # heavy imports (torch, faiss) only when a real pipeline is needed
    from docchat.core.embeddings import EmbeddingModel
    from docchat.core.faiss_store import FaissStore
    from docchat.core.llm import GeminiClient

    logger.info("Building RAG pipeline (embedding model %s, chat model %s)", cfg.EMBEDDING_MODEL, cfg.GEMINI_MODEL)
    return RAGPipeline(
        embed_model=EmbeddingModel(cfg.EMBEDDING_MODEL),
        store=FaissStore(index_path=cfg.FAISS_INDEX_PATH, metadata_path=cfg.METADATA_PATH),
        chat_client=GeminiClient(cfg.GEMINI_API_KEY, model=cfg.GEMINI_MODEL, timeout=cfg.GEMINI_TIMEOUT),
        chunk_options=cfg.chunk_options,
        top_k=cfg.SEARCH_TOP_K,
    )


def get_pipeline(request: Request) -> RAGPipeline:
    state = request.app.state
    if getattr(state, "pipeline", None) is None:
        with _build_lock:
            if getattr(state, "pipeline", None) is None:
                state.pipeline = build_pipeline()
    return state.pipeline
