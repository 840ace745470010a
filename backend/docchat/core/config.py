# backend/docchat/core/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

from docchat.core.types import ChunkOptions

BASE_DIR = Path(__file__).resolve().parents[2]  # backend/
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)


class Settings:
    # Chat completion (Gemini REST API)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "").strip()
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-flash-latest").strip()
    GEMINI_TIMEOUT: int = int(os.getenv("GEMINI_TIMEOUT", 30))

    # Local sentence-transformers model used for chunk and query embeddings
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2")

    # FAISS / storage paths
    STORAGE_DIR: Path = Path(os.getenv("STORAGE_DIR", str(BASE_DIR / "docchat" / "storage")))
    INDEX_DIR: Path = STORAGE_DIR / "indexes"
    FAISS_INDEX_PATH: str = str(INDEX_DIR / "faiss.index")
    METADATA_PATH: str = str(INDEX_DIR / "metadatas.json")

    # Chunking call-site defaults (characters)
    CHUNK_MAX_SIZE: int = int(os.getenv("CHUNK_MAX_SIZE", 500))
    CHUNK_OVERLAP: int = int(os.getenv("CHUNK_OVERLAP", 50))

    # Retrieval
    SEARCH_TOP_K: int = int(os.getenv("SEARCH_TOP_K", 5))

    # Uploads
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))

    # CORS (for dev)
    ALLOW_ORIGINS = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def chunk_options(self) -> ChunkOptions:
        return ChunkOptions(max_chunk_size=self.CHUNK_MAX_SIZE, overlap=self.CHUNK_OVERLAP)


# instantiate
settings = Settings()
