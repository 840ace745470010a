# main.py
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docchat.api.routes import router as api_router
from docchat.core.config import settings
from docchat.core.logger import configure_logging
from docchat.core.rag import RAGPipeline


def create_app(pipeline: Optional[RAGPipeline] = None, max_upload_bytes: Optional[int] = None) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Document Chat Backend")
    # None -> built from settings on first request (see api.deps.get_pipeline)
    app.state.pipeline = pipeline
    app.state.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES

    # Allow frontend to call backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
