"""
Tests for the Gemini REST client with a mocked requests session.
"""

from unittest.mock import MagicMock

import pytest
import requests

from docchat.core.exceptions import ChatCompletionError
from docchat.core.llm import GeminiClient
from docchat.core.types import ChatMessage


def gemini_response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def history():
    return [
        ChatMessage(role="user", content="What is docchat?"),
        ChatMessage(role="assistant", content="A document chat app."),
        ChatMessage(role="user", content="How does it chunk?"),
    ]


def test_generate_returns_candidate_text(session, history):
    session.post.return_value = gemini_response(payload={
        "candidates": [{"content": {"role": "model", "parts": [{"text": "  By lines.  "}]}}]
    })
    client = GeminiClient("key-123", model="gemini-test", timeout=5, session=session)

    assert client.generate("Use the context.", history) == "By lines."

    args, kwargs = session.post.call_args
    assert args[0].endswith("/models/gemini-test:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "key-123"
    assert kwargs["timeout"] == 5
    body = kwargs["json"]
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["contents"][2]["parts"][0]["text"] == "How does it chunk?"
    assert body["systemInstruction"]["parts"][0]["text"] == "Use the context."


def test_multiple_parts_joined(session, history):
    session.post.return_value = gemini_response(payload={
        "candidates": [{"content": {"parts": [{"text": "one"}, {"text": "two"}]}}]
    })
    assert GeminiClient("k", session=session).generate("", history) == "one\ntwo"


def test_missing_key_fails_without_request(session, history):
    with pytest.raises(ChatCompletionError, match="GEMINI_API_KEY not set"):
        GeminiClient("", session=session).generate("sys", history)
    session.post.assert_not_called()


def test_non_200_status(session, history):
    session.post.return_value = gemini_response(status_code=429, text="quota exceeded")

    with pytest.raises(ChatCompletionError, match="Gemini error 429") as exc_info:
        GeminiClient("k", session=session).generate("sys", history)
    assert exc_info.value.details["body"] == "quota exceeded"


def test_transport_error(session, history):
    session.post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(ChatCompletionError, match="HTTP exception"):
        GeminiClient("k", session=session).generate("sys", history)


def test_invalid_json(session, history):
    resp = gemini_response()
    resp.json.side_effect = ValueError("Expecting value")
    session.post.return_value = resp

    with pytest.raises(ChatCompletionError, match="Invalid JSON"):
        GeminiClient("k", session=session).generate("sys", history)


def test_blocked_prompt_has_no_text(session, history):
    session.post.return_value = gemini_response(payload={"promptFeedback": {"blockReason": "SAFETY"}})

    with pytest.raises(ChatCompletionError, match="Gemini returned no text") as exc_info:
        GeminiClient("k", session=session).generate("sys", history)
    assert exc_info.value.details["block_reason"] == "SAFETY"
