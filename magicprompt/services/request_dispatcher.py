"""Request dispatcher: translate, send and normalize one chat or vision call."""

import asyncio
import logging
import time
from typing import Any, Dict, Mapping, Optional, Union

from magicprompt.config import BackendConfig, get_api_key, resolve_endpoint
from magicprompt.models.response_normalizer import ResponseNormalizer
from magicprompt.models.schema_translator import NO_SEED, SchemaTranslator
from magicprompt.schemas.error_models import MagicPromptError
from magicprompt.schemas.message_models import (
    BackendId,
    MessageContent,
    MessageKind,
    NormalizedResult,
)
from magicprompt.services.transport import Transport


logger = logging.getLogger(__name__)


ANTHROPIC_VERSION = "2023-06-01"
OPENROUTER_REFERER = "https://github.com/HartsyAI/SwarmUI-MagicPromptExtension"
OPENROUTER_TITLE = "MagicPrompt"


def build_headers(backend: str, api_key: Optional[str]) -> Dict[str, str]:
    """Build authentication headers for a backend.

    Args:
        backend: Normalized backend id
        api_key: Configured API key, if any

    Returns:
        Header dictionary (possibly empty)
    """
    headers: Dict[str, str] = {}
    if backend == BackendId.ANTHROPIC.value:
        headers["anthropic-version"] = ANTHROPIC_VERSION
        if api_key:
            headers["x-api-key"] = api_key
        return headers

    if api_key and backend != BackendId.OLLAMA.value:
        headers["Authorization"] = f"Bearer {api_key}"
    if backend == BackendId.OPENROUTER.value:
        headers["HTTP-Referer"] = OPENROUTER_REFERER
        headers["X-Title"] = OPENROUTER_TITLE
    return headers


def summarize_body(body: Any) -> Any:
    """Copy a wire body with long base64 strings elided, for logging."""
    if isinstance(body, dict):
        return {key: summarize_body(value) for key, value in body.items()}
    if isinstance(body, list):
        return [summarize_body(value) for value in body]
    if isinstance(body, str) and len(body) > 256:
        return f"{body[:32]}...<{len(body)} chars>"
    return body


class RequestDispatcher:
    """Orchestrates translation, transport and normalization of one request."""

    def __init__(
        self,
        transport: Transport,
        backends: Mapping[str, Union[BackendConfig, Mapping]],
        translator: Optional[SchemaTranslator] = None,
        normalizer: Optional[ResponseNormalizer] = None
    ):
        """Initialize RequestDispatcher.

        Args:
            transport: Transport used to send requests
            backends: Backend connection table (base URLs, endpoints, API keys)
            translator: SchemaTranslator instance (optional)
            normalizer: ResponseNormalizer instance (optional)
        """
        self.transport = transport
        self.backends = backends
        self.translator = translator or SchemaTranslator()
        self.normalizer = normalizer or ResponseNormalizer()

    async def send(
        self,
        backend_id: Union[BackendId, str],
        content: Optional[MessageContent],
        model: str,
        kind: Union[MessageKind, str] = MessageKind.TEXT,
        seed: Optional[int] = NO_SEED
    ) -> NormalizedResult:
        """Send one chat or vision request and normalize the response.

        Never raises: every failure is returned as a failed NormalizedResult
        with a readable message.

        Args:
            backend_id: Target backend
            content: Message content
            model: Model id
            kind: Text or Vision
            seed: Sampling seed, -1 for none

        Returns:
            NormalizedResult
        """
        start_time = time.time()
        try:
            backend = self.translator.normalize_backend(backend_id)
            endpoint = resolve_endpoint(self.backends, backend, "chat")

            # Image decoding and resizing happen off the event loop
            body = await asyncio.to_thread(
                self.translator.translate, backend, content, model, kind, seed
            )
            wire_body = body.to_wire()
            logger.debug(f"Request body for {backend}: {summarize_body(wire_body)}")

            headers = build_headers(backend, get_api_key(self.backends, backend))
            raw_response = await self.transport.post(
                endpoint, wire_body, headers=headers, backend=backend
            )
            result = self.normalizer.normalize(backend, raw_response)
        except MagicPromptError as e:
            logger.warning(f"Request to {backend_id} failed ({e.error_type}): {e.message}")
            return NormalizedResult.failure(e.message)
        except asyncio.CancelledError:
            logger.info(f"Request to {backend_id} was cancelled")
            raise
        except Exception as e:
            logger.error(f"Unexpected error sending request to {backend_id}: {e}", exc_info=True)
            return NormalizedResult.failure(f"Unexpected error: {e}")

        logger.info(
            f"{backend} request for model={model} finished in "
            f"{time.time() - start_time:.2f}s (success={result.success})"
        )
        return result
