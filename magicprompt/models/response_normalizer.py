"""Extraction of generated text from each backend's response shape."""

import json
import logging
from typing import Any, Union

from magicprompt.models.error_classifier import classify_error
from magicprompt.schemas.error_models import MalformedResponse, UnsupportedBackend
from magicprompt.schemas.message_models import BackendId, NormalizedResult


logger = logging.getLogger(__name__)


MALFORMED_RESPONSE = "malformed response"
EMPTY_RESPONSE = "Empty response received from LLM"

OPENAI_COMPATIBLE_BACKENDS = frozenset({
    BackendId.OPENAI.value,
    BackendId.OPENAIAPI.value,
    BackendId.OPENROUTER.value,
    BackendId.GROK.value,
})


class ResponseNormalizer:
    """Normalizes raw backend responses into NormalizedResult values."""

    def normalize(self, backend_id: Union[BackendId, str], raw_response: Any) -> NormalizedResult:
        """Extract the generated text from a raw backend response.

        Never raises: unknown backends, provider error envelopes and
        unexpected shapes all produce a failed result.

        Args:
            backend_id: Backend that produced the response
            raw_response: Parsed JSON response

        Returns:
            NormalizedResult with the text or a readable error
        """
        backend = backend_id.value if isinstance(backend_id, BackendId) else (backend_id or "").lower()

        if self._is_error_envelope(raw_response):
            message = classify_error(raw_response, backend)
            logger.warning(f"Backend {backend} returned an error: {message}")
            return NormalizedResult.failure(message)

        try:
            text = self.extract_text(backend, raw_response)
        except UnsupportedBackend as e:
            return NormalizedResult.failure(e.message)
        except MalformedResponse as e:
            logger.warning(f"Malformed {backend} response: {self._preview(raw_response)}")
            return NormalizedResult.failure(e.message)

        if not text or not text.strip():
            logger.warning(f"Empty {backend} response: {self._preview(raw_response)}")
            return NormalizedResult.failure(EMPTY_RESPONSE)

        return NormalizedResult.ok(text)

    def extract_text(self, backend: str, raw_response: Any) -> str:
        """Dispatch to the per-backend extractor.

        Raises:
            UnsupportedBackend: If the backend id is unknown
            MalformedResponse: If expected fields are missing
        """
        if backend == BackendId.OLLAMA.value:
            return self._extract_ollama(raw_response)
        if backend == BackendId.ANTHROPIC.value:
            return self._extract_anthropic(raw_response)
        if backend in OPENAI_COMPATIBLE_BACKENDS:
            return self._extract_openai(raw_response)
        raise UnsupportedBackend(backend)

    @staticmethod
    def _extract_ollama(raw_response: Any) -> str:
        try:
            content = raw_response["message"]["content"]
        except (KeyError, TypeError, IndexError):
            raise MalformedResponse(MALFORMED_RESPONSE) from None
        if not isinstance(content, str):
            raise MalformedResponse(MALFORMED_RESPONSE)
        return content

    @staticmethod
    def _extract_openai(raw_response: Any) -> str:
        try:
            content = raw_response["choices"][0]["message"]["content"]
        except (KeyError, TypeError, IndexError):
            raise MalformedResponse(MALFORMED_RESPONSE) from None
        return content_to_text(content)

    @staticmethod
    def _extract_anthropic(raw_response: Any) -> str:
        try:
            blocks = raw_response["content"]
        except (KeyError, TypeError):
            raise MalformedResponse(MALFORMED_RESPONSE) from None
        if not isinstance(blocks, list):
            raise MalformedResponse(MALFORMED_RESPONSE)

        texts = []
        for block in blocks:
            if not isinstance(block, dict) or block.get("type") != "text":
                continue
            text = block.get("text")
            if text is None:
                text = ""
            if not isinstance(text, str):
                raise MalformedResponse(MALFORMED_RESPONSE)
            texts.append(text)
        if not texts:
            raise MalformedResponse(MALFORMED_RESPONSE)
        return "".join(texts)

    @staticmethod
    def _is_error_envelope(raw_response: Any) -> bool:
        if not isinstance(raw_response, dict):
            return False
        if raw_response.get("type") == "error":
            return True
        return bool(raw_response.get("error")) and not (
            "choices" in raw_response or "message" in raw_response or "content" in raw_response
        )

    @staticmethod
    def _preview(raw_response: Any) -> str:
        text = raw_response if isinstance(raw_response, str) else repr(raw_response)
        return text[:200]


def content_to_text(content: Any) -> str:
    """Turn an OpenAI-style message content into a string.

    OpenRouter may return content as a list of parts or as a JSON object
    rather than a plain string.
    """
    if isinstance(content, str):
        return content
    if content is None:
        raise MalformedResponse(MALFORMED_RESPONSE)
    if isinstance(content, list) and content and all(
        isinstance(part, dict) and isinstance(part.get("text"), str) for part in content
    ):
        return "".join(part["text"] for part in content)
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(content)
