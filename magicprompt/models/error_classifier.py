"""Classification of backend error payloads into readable one-line messages."""

import json
import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Kinds of failure reported by LLM backends."""
    GENERIC = "generic"
    AUTHENTICATION = "authentication"
    QUOTA = "quota"
    TOKEN_LIMIT = "token_limit"
    SERVER_ERROR = "server_error"
    UNSUPPORTED_IMAGE = "unsupported_image"
    MAX_TOKENS_PARAMETER = "max_tokens_parameter"
    CONNECTIVITY = "connectivity"
    HTTP_REQUEST = "http_request"
    MODEL_NOT_FOUND = "model_not_found"


ERROR_TITLES = {
    ErrorCategory.GENERIC: "API Error",
    ErrorCategory.AUTHENTICATION: "Authentication Error",
    ErrorCategory.QUOTA: "API Usage Limit Reached",
    ErrorCategory.TOKEN_LIMIT: "Response Length Limit Reached",
    ErrorCategory.SERVER_ERROR: "Server Error",
    ErrorCategory.UNSUPPORTED_IMAGE: "Image Upload Error",
    ErrorCategory.MAX_TOKENS_PARAMETER: "Parameter Error: max_tokens",
    ErrorCategory.CONNECTIVITY: "Connection Error",
    ErrorCategory.HTTP_REQUEST: "HTTP Request Error",
    ErrorCategory.MODEL_NOT_FOUND: "Model Not Found",
}

MAX_ORIGINAL_MESSAGE_LENGTH = 100


def _contains_any(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


# Checked in order, first match wins
ERROR_SIGNATURES: List[Tuple[ErrorCategory, Callable[[str], bool]]] = [
    (ErrorCategory.AUTHENTICATION, lambda c: _contains_any(
        c, "unauthorized", "authentication", "api key", "apikey", "invalid key",
        "not authenticate", "forbidden", "permission", "401", "403"
    )),
    (ErrorCategory.QUOTA, lambda c: _contains_any(
        c, "quota", "rate limit", "rate_limit", "too many requests", "usage_limit", "429"
    )),
    (ErrorCategory.TOKEN_LIMIT, lambda c: (
        ("token" in c and _contains_any(c, "limit", "exceed"))
        or _contains_any(c, "too long", "context_length_exceeded", "maximum context length")
    )),
    (ErrorCategory.SERVER_ERROR, lambda c: _contains_any(
        c, "server_error", "500", "502", "503", "internal server error", "maintenance", "unavailable"
    )),
    (ErrorCategory.MAX_TOKENS_PARAMETER, lambda c: "max_tokens" in c and "max_completion_tokens" in c),
    (ErrorCategory.UNSUPPORTED_IMAGE, lambda c: "image" in c and _contains_any(c, "error", "invalid", "unsupported")),
    (ErrorCategory.MODEL_NOT_FOUND, lambda c: "model" in c and _contains_any(c, "not found", "not loaded")),
    (ErrorCategory.CONNECTIVITY, lambda c: _contains_any(
        c, "connection", "connect", "network", "dns", "dial tcp"
    )),
    (ErrorCategory.HTTP_REQUEST, lambda c: _contains_any(c, "http", "request")),
]


def normalize_backend_name(backend: Optional[str]) -> Optional[str]:
    """Normalize backend aliases for display."""
    if not backend:
        return None
    backend = backend.lower()
    if backend in ("openaiapi", "openai-api"):
        return "openai"
    if backend in ("anthropicapi", "anthropic-api"):
        return "anthropic"
    return backend


def detect_error_category(content: Optional[str]) -> ErrorCategory:
    """Detect the error category from raw error text."""
    if not content:
        return ErrorCategory.GENERIC
    lowered = content.lower()
    for category, matches in ERROR_SIGNATURES:
        if matches(lowered):
            return category
    return ErrorCategory.GENERIC


def _truncate(text: str) -> str:
    if len(text) > MAX_ORIGINAL_MESSAGE_LENGTH:
        return text[:MAX_ORIGINAL_MESSAGE_LENGTH] + "..."
    return text


def extract_error_message(body: Any) -> str:
    """Pull the provider's own error message out of a response body.

    Accepts a parsed JSON value or raw text. Understands the OpenAI and
    Anthropic `{"error": {"message": ...}}`, Ollama `{"error": "..."}` and
    plain `{"message": ...}` shapes, and OpenRouter's `metadata.raw` detail.
    """
    if body is None:
        return "Empty response"

    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")

    if isinstance(body, str):
        if not body.strip():
            return "Empty response"
        try:
            parsed = json.loads(body)
        except ValueError:
            return _truncate(body.strip())
        if not isinstance(parsed, dict):
            return _truncate(body.strip())
        body = parsed

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            metadata = error.get("metadata") or {}
            raw = metadata.get("raw") if isinstance(metadata, dict) else None
            if message and raw:
                provider = metadata.get("provider_name") or "provider"
                return _truncate(f"{message} ({provider}: {raw})")
            if message:
                return str(message)
        elif isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
        return _truncate(json.dumps(body))

    return _truncate(str(body))


def describe_error(
    category: ErrorCategory,
    original_message: Optional[str] = None,
    backend: Optional[str] = None
) -> str:
    """Format a readable one-line error message."""
    title = ERROR_TITLES.get(category, ERROR_TITLES[ErrorCategory.GENERIC])
    provider = normalize_backend_name(backend)
    if provider:
        title = f"{title} [{provider}]"
    if original_message:
        original = " ".join(str(original_message).split())
        return f"{title}: {original}"
    return title


def classify_error(
    body: Any,
    backend: Optional[str] = None,
    status_code: Optional[int] = None
) -> str:
    """Turn an error response body into a readable one-line message.

    Args:
        body: Parsed JSON or raw text of the error response
        backend: Backend that produced the error
        status_code: HTTP status code, if any

    Returns:
        Readable one-line error message
    """
    original = extract_error_message(body)
    searchable = original if status_code is None else f"{status_code} {original}"
    category = detect_error_category(searchable)
    logger.debug(f"Classified {backend} error as {category.value}: {original}")
    if status_code is not None:
        original = f"HTTP {status_code} - {original}"
    return describe_error(category, original, backend)
