# backend/docchat/api/routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from docchat.api.deps import get_pipeline
from docchat.api.models import ChatRequest, ChatResponse, IngestResponse
from docchat.core.exceptions import ConfigurationError, DocChatError, InvalidMessageError, ParsingError
from docchat.core.parser import extract_text, is_allowed_filename
from docchat.core.rag import RAGPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

# caller mistakes; everything else from the pipeline is a server-side failure
CLIENT_ERRORS = (ConfigurationError, ParsingError, InvalidMessageError)


def _format_size(num_bytes: int) -> str:
    mb = 1024 * 1024
    if num_bytes >= mb and num_bytes % mb == 0:
        return f"{num_bytes // mb}MB"
    return f"{num_bytes // 1024}KB"


def _to_http(exc: DocChatError) -> HTTPException:
    if isinstance(exc, CLIENT_ERRORS):
        return HTTPException(status_code=400, detail=exc.message)
    logger.error("Request failed: %s", exc)
    return HTTPException(status_code=500, detail=exc.message)


# ---------- Endpoints ----------
@router.post("/ingest", response_model=IngestResponse)
async def ingest(
    request: Request,
    file: Optional[UploadFile] = File(None),
    pipeline: RAGPipeline = Depends(get_pipeline),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    if not is_allowed_filename(file.filename):
        raise HTTPException(status_code=400, detail="Invalid file type. Only .md and .txt files are allowed")

    max_bytes = request.app.state.max_upload_bytes
    too_large = HTTPException(
        status_code=400,
        detail=f"File too large. Maximum size is {_format_size(max_bytes)}",
    )
    # multipart parsing records the size; reject before pulling the body into memory
    if file.size is not None and file.size > max_bytes:
        raise too_large
    data = await file.read()
    if len(data) > max_bytes:
        raise too_large

    try:
        parsed = extract_text(file.filename, data, file.content_type)
        chunk_count = await run_in_threadpool(pipeline.ingest, parsed)
    except DocChatError as e:
        raise _to_http(e) from e
    return IngestResponse(success=True, chunk_count=chunk_count)


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, pipeline: RAGPipeline = Depends(get_pipeline)):
    try:
        response, sources = await run_in_threadpool(pipeline.answer, req.messages)
    except DocChatError as e:
        raise _to_http(e) from e
    return ChatResponse(response=response, sources=sources)
