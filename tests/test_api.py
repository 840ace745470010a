"""
API tests for /health, /api/ingest and /api/chat.

The app is built with an injected pipeline of fakes (see conftest.py).
Dependencies: pytest, fastapi.testclient
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from docchat.core.exceptions import ChatCompletionError, EmbeddingError
from docchat.main import create_app


def upload(client, name, data, content_type="text/markdown"):
    return client.post("/api/ingest", files={"file": (name, data, content_type)})


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestIngestValidation:
    def test_no_file(self, client):
        response = client.post("/api/ingest")

        assert response.status_code == 400
        assert response.json()["detail"] == "No file provided"

    def test_unsupported_file_type(self, client, memory_store):
        response = upload(client, "test.js", b"console.log(1)", "application/javascript")

        assert response.status_code == 400
        assert "file type" in response.json()["detail"]
        assert memory_store.chunks == []

    def test_file_too_large(self, client):
        response = upload(client, "large.md", b"a" * 2048)

        assert response.status_code == 400
        assert "too large" in response.json()["detail"]

    def test_oversized_upload_rejected_before_read(self, client):
        with patch("starlette.datastructures.UploadFile.read", new_callable=AsyncMock) as read:
            response = upload(client, "large.md", b"a" * 2048)

        assert response.status_code == 400
        assert response.json()["detail"] == "File too large. Maximum size is 1KB"
        read.assert_not_awaited()

    def test_bad_mime_type_on_allowed_extension(self, client):
        response = upload(client, "notes.md", b"# hi", "application/json")

        assert response.status_code == 400
        assert response.json()["detail"] == "Unsupported file type: application/json"


class TestIngest:
    def test_markdown_file(self, client, memory_store):
        response = upload(client, "test.md", b"# Title\n\ntest content")

        assert response.status_code == 200
        assert response.json() == {"success": True, "chunk_count": 1}
        assert memory_store.chunks[0].metadata.source == "test.md"
        assert memory_store.chunks[0].content == "# Title\n\ntest content"

    def test_text_file(self, client):
        response = upload(client, "test.txt", b"plain text", "text/plain")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_empty_file_indexes_nothing(self, client, memory_store):
        response = upload(client, "empty.md", b"\n\n")

        assert response.status_code == 200
        assert response.json() == {"success": True, "chunk_count": 0}
        assert memory_store.chunks == []

    def test_embedding_failure_is_500(self, client, embedder):
        with patch.object(embedder, "embed_texts", side_effect=EmbeddingError("Failed to generate embeddings: boom")):
            response = upload(client, "test.md", b"content")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate embeddings: boom"


class TestChat:
    def test_answer_with_sources(self, client, chat_client):
        upload(client, "guide.md", b"Bananas are yellow.")

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "What colour are bananas?"}]})

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Grounded answer."
        assert body["sources"][0]["id"] == "chunk-0"
        assert body["sources"][0]["metadata"] == {"source": "guide.md", "start_line": 1, "end_line": 1}
        assert len(chat_client.calls) == 1

    def test_last_message_not_from_user(self, client):
        response = client.post("/api/chat", json={"messages": [{"role": "assistant", "content": "hi"}]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid message format"

    def test_unknown_role_rejected(self, client):
        response = client.post("/api/chat", json={"messages": [{"role": "system", "content": "x"}]})
        assert response.status_code == 422

    def test_chat_backend_failure_is_500(self, client, chat_client):
        with patch.object(chat_client, "generate", side_effect=ChatCompletionError("Gemini error 503")):
            response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hello"}]})

        assert response.status_code == 500
        assert response.json()["detail"] == "Gemini error 503"


def test_pipeline_built_once_when_not_injected(pipeline):
    with patch("docchat.api.deps.build_pipeline", return_value=pipeline) as build:
        app_client = TestClient(create_app())
        first = app_client.post("/api/ingest", files={"file": ("a.txt", b"one", "text/plain")})
        second = app_client.post("/api/ingest", files={"file": ("b.txt", b"two", "text/plain")})

    assert first.status_code == second.status_code == 200
    build.assert_called_once_with()
