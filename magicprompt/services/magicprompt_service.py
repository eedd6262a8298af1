"""MagicPrompt service: handles chat, vision, prompt and caption requests."""

import logging
from typing import Any, Dict, Optional

from magicprompt.config import Settings
from magicprompt.schemas.api_models import ModelListResult, PromptRequest
from magicprompt.schemas.error_models import InvalidArgument
from magicprompt.schemas.message_models import (
    MediaItem,
    MediaType,
    MessageContent,
    MessageKind,
    NormalizedResult,
)
from magicprompt.services.action_resolver import ActionResolver, ResolvedAction
from magicprompt.services.model_list_provider import ModelListProvider
from magicprompt.services.request_dispatcher import RequestDispatcher
from magicprompt.services.transport import HttpxTransport, Transport
from magicprompt.utils.prompt_cache import PromptCache


logger = logging.getLogger(__name__)


CACHED_ACTIONS = frozenset({"prompt"})


class MagicPromptService:
    """Service layer between the UI call surface and the dispatcher."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[Transport] = None,
        dispatcher: Optional[RequestDispatcher] = None,
        resolver: Optional[ActionResolver] = None,
        prompt_cache: Optional[PromptCache] = None,
        model_list_provider: Optional[ModelListProvider] = None
    ):
        """Initialize MagicPromptService.

        Args:
            settings: Settings snapshot
            transport: Transport instance (optional)
            dispatcher: RequestDispatcher instance (optional)
            resolver: ActionResolver instance (optional)
            prompt_cache: PromptCache instance (optional)
            model_list_provider: ModelListProvider instance (optional)
        """
        self.settings = settings
        self.transport = transport or HttpxTransport(timeout=settings.request_timeout)
        self.dispatcher = dispatcher or RequestDispatcher(
            transport=self.transport,
            backends=settings.backends
        )
        self.resolver = resolver or ActionResolver(settings)
        if prompt_cache is None:
            prompt_cache = PromptCache(max_size=settings.prompt_cache_size)
        self.prompt_cache = prompt_cache
        self.model_list_provider = model_list_provider or ModelListProvider(
            transport=self.transport,
            backends=settings.backends
        )

        # Service state
        self._request_count = 0
        self._failure_count = 0

    async def handle(self, request: PromptRequest) -> NormalizedResult:
        """Handle one UI request. Never raises.

        Args:
            request: Inbound prompt request

        Returns:
            NormalizedResult
        """
        self._request_count += 1
        try:
            resolved = self.resolver.resolve(
                action=request.action,
                has_image=request.image is not None,
                instruction_id=request.instruction_id,
                variables=request.variables,
                backend=request.backend,
                model=request.model
            )
            content = self.build_content(request, resolved)
        except InvalidArgument as e:
            logger.warning(f"Rejected {request.action} request: {e.message}")
            self._failure_count += 1
            return NormalizedResult.failure(e.message)

        async def send() -> NormalizedResult:
            return await self.dispatcher.send(
                resolved.backend,
                content,
                resolved.model,
                resolved.kind,
                request.seed
            )

        if self._use_cache(request, resolved):
            cache_id = f"{request.instruction_id or request.action}|{resolved.backend}|{resolved.model}"
            result = await self.prompt_cache.get_or_create(request.input, cache_id, send)
        else:
            result = await send()

        if not result.success:
            self._failure_count += 1
        return result

    @staticmethod
    def build_content(request: PromptRequest, resolved: ResolvedAction) -> MessageContent:
        """Build the MessageContent for a resolved request."""
        media = []
        if request.image is not None:
            media.append(MediaItem(
                type=MediaType.BASE64,
                data=request.image,
                media_type=request.media_type
            ))
        return MessageContent(
            text=request.input,
            instructions=resolved.instructions,
            media=media,
            keep_alive=resolved.keep_alive
        )

    def _use_cache(self, request: PromptRequest, resolved: ResolvedAction) -> bool:
        return (
            self.settings.prompt_cache_enabled
            and request.action in CACHED_ACTIONS
            and resolved.kind == MessageKind.TEXT
            and not request.variables
        )

    async def list_models(self, backend: Optional[str] = None) -> ModelListResult:
        """List models for a backend, defaulting to the active text backend."""
        return await self.model_list_provider.list_models(backend or self.settings.backend)

    def get_service_stats(self) -> Dict[str, Any]:
        """Get service statistics."""
        return {
            "backend": self.settings.backend,
            "model": self.settings.model,
            "vision_backend": self.settings.vision_backend,
            "vision_model": self.settings.vision_model,
            "request_count": self._request_count,
            "failure_count": self._failure_count,
            "cached_prompts": len(self.prompt_cache),
        }

    async def cleanup(self):
        """Close the transport."""
        close = getattr(self.transport, "close", None)
        if close is None:
            return
        try:
            await close()
            logger.info("MagicPromptService cleaned up successfully")
        except Exception as e:
            logger.error(f"Error during MagicPromptService cleanup: {e}")
