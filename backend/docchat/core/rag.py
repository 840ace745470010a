# backend/docchat/core/rag.py
"""
RAG pipeline: Ingest -> Retrieve -> Answer.

Key methods:
- ingest(parsed): chunk a parsed document, embed the chunks and store them.
- retrieve(query, k): nearest chunks for a free-text query.
- answer(messages, k): ground the latest user message in retrieved chunks and ask the chat model.

Collaborators are passed in (embedder, vector store, chat client); nothing is
created at import time.
"""
import logging
from typing import List, Optional, Tuple

from docchat.core.chunker import chunk_text
from docchat.core.exceptions import EmbeddingError, InvalidMessageError
from docchat.core.types import ChatMessage, Chunk, ChunkOptions, ParseResult, SearchResult
from docchat.core.vector_store import VectorStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided documentation.\n"
    "Use the following context to answer the user's question. "
    "If the context doesn't contain the answer, say so.\n\n"
    "Context:\n{context}"
)
CONTEXT_SEPARATOR = "\n\n---\n\n"


class RAGPipeline:
    def __init__(self, embed_model, store: VectorStore, chat_client, chunk_options: ChunkOptions, top_k: int = 5):
        self.embed_model = embed_model
        self.store = store
        self.chat_client = chat_client
        self.chunk_options = chunk_options
        self.top_k = top_k

    # --- Ingestion path ---
    def ingest(self, parsed: ParseResult) -> int:
        """
        Chunk, embed and store one parsed document. Returns the number of chunks stored.
        """
        source = parsed.metadata.get("source", "unknown")
        chunks = chunk_text(parsed.content, self.chunk_options)
        for chunk in chunks:
            chunk.metadata.source = source

        if not chunks:
            logger.info("No content to index for %s", source)
            return 0

        vectors = self.embed_model.embed_texts([c.content for c in chunks])
        if len(vectors) != len(chunks):
            raise EmbeddingError(
                f"Embedding count mismatch: expected {len(chunks)}, got {len(vectors)}",
                details={"source": source},
            )

        # the store persists the batch itself, or raises and keeps none of it
        self.store.store(chunks, vectors)
        logger.info("Indexed %s: %d chunks", source, len(chunks))
        return len(chunks)

    # --- Retrieval path ---
    def retrieve(self, query: str, k: Optional[int] = None) -> List[SearchResult]:
        query_vector = self.embed_model.embed_text(query)
        return self.store.search(query_vector, k or self.top_k)

    @staticmethod
    def build_context(results: List[SearchResult]) -> str:
        return CONTEXT_SEPARATOR.join(
            f"Source: {r.chunk.metadata.source}\n{r.chunk.content}" for r in results
        )

    def answer(self, messages: List[ChatMessage], k: Optional[int] = None) -> Tuple[str, List[Chunk]]:
        """
        Answer the last user message of a conversation.

        Returns: (response_text, source_chunks) where source_chunks are the
        retrieved chunks in ranking order.
        """
        if not messages or messages[-1].role != "user":
            raise InvalidMessageError("Invalid message format")
        if not messages[-1].content.strip():
            raise InvalidMessageError("Message content cannot be empty")

        results = self.retrieve(messages[-1].content, k)
        scores = [round(r.score, 4) for r in results]
        logger.debug("Retrieved %d chunks, scores=%s", len(results), scores)

        system_prompt = SYSTEM_PROMPT.format(context=self.build_context(results))
        history = [ChatMessage(role=m.role, content=m.content) for m in messages]
        response = self.chat_client.generate(system_prompt, history)
        return response, [r.chunk for r in results]
