# backend/docchat/core/exceptions.py
"""
Exception hierarchy for docchat.

Every error carries a human-readable message plus an optional details dict
so routes can surface the message and logs can keep the context.
"""
from typing import Any, Dict, Optional


class DocChatError(Exception):
    """Base exception for all docchat errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(DocChatError):
    """Raised when caller-supplied options (chunk size, overlap, ...) are invalid."""

    def __init__(self, message: str, option: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if option:
            details["option"] = option
        super().__init__(message, details)


class ParsingError(DocChatError):
    """Raised when an uploaded file cannot be turned into text."""

    def __init__(self, message: str, filename: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, details)


class EmbeddingError(DocChatError):
    """Raised when embedding generation fails or returns the wrong shape."""

    pass


class VectorStoreError(DocChatError):
    """Raised when vector store operations fail."""

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ChatCompletionError(DocChatError):
    """Raised when the chat-completion backend cannot produce an answer."""

    pass


class InvalidMessageError(DocChatError):
    """Raised when a chat request does not end with a user message."""

    pass
