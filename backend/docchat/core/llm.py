# backend/docchat/core/llm.py
"""
Minimal Gemini chat-completion client over the public REST API.

Constructed explicitly (api key, model, timeout) and handed to RAGPipeline,
so tests can swap in any object with the same generate() method.
"""
import logging
from typing import Any, List, Optional

import requests

from docchat.core.exceptions import ChatCompletionError
from docchat.core.types import ChatMessage

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# Gemini names the assistant side "model"
ROLE_MAP = {"user": "user", "assistant": "model"}


def _extract_text(obj: Any) -> str:
    if obj is None:
        return ""
    if isinstance(obj, str):
        return obj
    if isinstance(obj, list):
        return "\n".join(t for t in (_extract_text(x) for x in obj) if t)
    if isinstance(obj, dict):
        for k in ("text", "parts", "content"):
            if obj.get(k) is not None:
                return _extract_text(obj[k])
    return ""


class GeminiClient:
    def __init__(self, api_key: str, model: str = "gemini-flash-latest", timeout: int = 30,
                 session: Optional[requests.Session] = None):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def _build_body(self, system_prompt: str, messages: List[ChatMessage]) -> dict:
        body = {
            "contents": [
                {"role": ROLE_MAP[m.role], "parts": [{"text": m.content}]}
                for m in messages
            ]
        }
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        return body

    def generate(self, system_prompt: str, messages: List[ChatMessage]) -> str:
        """
        Send the conversation to Gemini and return the first candidate's text.

        Raises:
            ChatCompletionError: missing key, transport failure, non-200 status,
                unparsable body or an empty answer.
        """
        if not self.api_key:
            raise ChatCompletionError("GEMINI_API_KEY not set")

        endpoint = GEMINI_ENDPOINT.format(model=self.model)
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        logger.debug("Calling Gemini model %s with %d messages", self.model, len(messages))

        try:
            resp = self.session.post(
                endpoint, headers=headers, json=self._build_body(system_prompt, messages), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.exception("Gemini request failed")
            raise ChatCompletionError(f"HTTP exception: {e}") from e

        if resp.status_code != 200:
            raw = resp.text or "<no-body>"
            preview = raw if len(raw) < 2000 else raw[:2000] + "...(truncated)"
            logger.warning("Gemini returned %s: %s", resp.status_code, preview)
            raise ChatCompletionError(
                f"Gemini error {resp.status_code}", details={"body": preview}
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ChatCompletionError(f"Invalid JSON from Gemini: {e}") from e

        candidates = payload.get("candidates") or []
        text_out = _extract_text(candidates[0].get("content")) if candidates else ""
        text_out = (text_out or "").strip()
        if not text_out:
            reason = (payload.get("promptFeedback") or {}).get("blockReason")
            raise ChatCompletionError("Gemini returned no text", details={"block_reason": reason} if reason else None)
        return text_out
