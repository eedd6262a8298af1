"""Fetches the list of models each backend offers."""

import logging
from typing import Any, List, Mapping, Union

from magicprompt.config import BackendConfig, get_api_key, resolve_endpoint
from magicprompt.schemas.api_models import ModelInfo, ModelListResult
from magicprompt.schemas.error_models import MagicPromptError, MalformedResponse, UnsupportedBackend
from magicprompt.schemas.message_models import BackendId
from magicprompt.services.request_dispatcher import build_headers
from magicprompt.services.transport import Transport
from magicprompt.utils.single_flight import SingleFlight


logger = logging.getLogger(__name__)


def parse_models(backend: str, raw_response: Any) -> List[ModelInfo]:
    """Parse a models endpoint response.

    Ollama lists `models[]` with `name`/`model`; the other backends list
    `data[]` with `id` and an optional display name.

    Raises:
        MalformedResponse: If the list is missing
    """
    if not isinstance(raw_response, dict):
        raise MalformedResponse()

    if backend == BackendId.OLLAMA.value:
        entries = raw_response.get("models")
        if not isinstance(entries, list):
            raise MalformedResponse()
        models = [
            ModelInfo(id=entry.get("model") or entry["name"], name=entry.get("name"))
            for entry in entries
            if isinstance(entry, dict) and (entry.get("model") or entry.get("name"))
        ]
    else:
        entries = raw_response.get("data")
        if not isinstance(entries, list):
            raise MalformedResponse()
        models = [
            ModelInfo(id=entry["id"], name=entry.get("name") or entry.get("display_name") or entry["id"])
            for entry in entries
            if isinstance(entry, dict) and entry.get("id")
        ]

    return sorted(models, key=lambda model: model.id.lower())


class ModelListProvider:
    """Fetches model lists, sharing one in-flight request per backend."""

    def __init__(
        self,
        transport: Transport,
        backends: Mapping[str, Union[BackendConfig, Mapping]]
    ):
        """Initialize ModelListProvider.

        Args:
            transport: Transport used to send requests
            backends: Backend connection table
        """
        self.transport = transport
        self.backends = backends
        self._single_flight = SingleFlight()

    async def list_models(self, backend: str) -> ModelListResult:
        """List the models of a backend. Never raises."""
        backend = (backend or "").lower()
        return await self._single_flight.do(("models", backend), lambda: self._fetch(backend))

    async def _fetch(self, backend: str) -> ModelListResult:
        logger.info(f"Fetching available models for backend={backend}")
        try:
            if backend not in {b.value for b in BackendId}:
                raise UnsupportedBackend(backend)
            endpoint = resolve_endpoint(self.backends, backend, "models")
            headers = build_headers(backend, get_api_key(self.backends, backend))
            raw_response = await self.transport.get(endpoint, headers=headers, backend=backend)
            models = parse_models(backend, raw_response)
        except MagicPromptError as e:
            logger.warning(f"Failed to load models for {backend}: {e.message}")
            return ModelListResult(success=False, backend=backend, error=e.message)
        except Exception as e:
            logger.error(f"Unexpected error loading models for {backend}: {e}", exc_info=True)
            return ModelListResult(success=False, backend=backend, error=f"Failed to load models: {e}")

        logger.info(f"Loaded {len(models)} models for backend={backend}")
        return ModelListResult(success=True, backend=backend, models=models)
