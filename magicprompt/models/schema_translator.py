"""Translation of uniform message content into backend-specific request bodies."""

import logging
from typing import List, Optional, Union

from magicprompt.models.image_compressor import ImageCompressor, ImageFormat
from magicprompt.schemas.error_models import InvalidArgument, UnsupportedBackend
from magicprompt.schemas.message_models import (
    AnthropicMessage,
    AnthropicRequestBody,
    BackendId,
    ImagePart,
    ImageSource,
    ImageUrl,
    ImageUrlPart,
    MediaItem,
    MediaType,
    MessageContent,
    MessageKind,
    OllamaMessage,
    OllamaOptions,
    OllamaRequestBody,
    OpenAIMessage,
    OpenAIRequestBody,
    RequestBody,
    TextPart,
)
from magicprompt.utils.data_url import strip_data_url_prefix, to_data_url


logger = logging.getLogger(__name__)


NO_SEED = -1

OPENAI_COMPATIBLE_BACKENDS = frozenset({
    BackendId.OPENAI.value,
    BackendId.OPENAIAPI.value,
    BackendId.OPENROUTER.value,
    BackendId.GROK.value,
})

# Image encoding each backend receives. Grok does not accept WEBP.
BACKEND_IMAGE_FORMATS = {
    BackendId.OLLAMA.value: ImageFormat.JPG,
    BackendId.OPENAI.value: ImageFormat.WEBP,
    BackendId.OPENAIAPI.value: ImageFormat.WEBP,
    BackendId.OPENROUTER.value: ImageFormat.WEBP,
    BackendId.GROK.value: ImageFormat.PNG,
    BackendId.ANTHROPIC.value: ImageFormat.PNG,
}

OLLAMA_TEMPERATURE = 1.0
OLLAMA_TOP_P = 0.9
OPENAI_MAX_TOKENS = 1000
OPENAI_TEMPERATURE = 1.0
OPENAI_TOP_P = 0.9
ANTHROPIC_MAX_TOKENS = 1024


class SchemaTranslator:
    """Builds the exact JSON body each chat/vision API expects."""

    def __init__(self, compressor: Optional[ImageCompressor] = None):
        """Initialize SchemaTranslator.

        Args:
            compressor: ImageCompressor used for vision payloads (optional)
        """
        self.compressor = compressor or ImageCompressor()

    @staticmethod
    def supported_backends() -> List[str]:
        """List the backend ids the translator can build bodies for."""
        return [backend.value for backend in BackendId]

    def normalize_backend(self, backend_id: Union[BackendId, str, None]) -> str:
        """Lower-case a backend id and check that it is supported.

        Raises:
            UnsupportedBackend: If the id is unknown
        """
        if isinstance(backend_id, BackendId):
            return backend_id.value
        backend = (backend_id or "").strip().lower()
        if backend not in BACKEND_IMAGE_FORMATS:
            raise UnsupportedBackend(backend_id)
        return backend

    def translate(
        self,
        backend_id: Union[BackendId, str],
        content: Optional[MessageContent],
        model: str,
        kind: Union[MessageKind, str] = MessageKind.TEXT,
        seed: Optional[int] = NO_SEED
    ) -> RequestBody:
        """Translate message content into a backend request body.

        Args:
            backend_id: Target backend
            content: Message content to send
            model: Model id
            kind: Text or Vision
            seed: Sampling seed, -1 for none

        Returns:
            Backend-specific request body

        Raises:
            InvalidArgument: If content or model is missing, or the content
                does not fit the message kind
            UnsupportedBackend: If the backend id is unknown
        """
        if content is None:
            raise InvalidArgument("Message content cannot be null.")
        if not model or not model.strip():
            raise InvalidArgument("Model cannot be null or empty.")

        try:
            kind = MessageKind(kind)
        except ValueError:
            raise InvalidArgument(f"Unknown message kind: {kind}") from None

        if kind == MessageKind.VISION and not content.media:
            raise InvalidArgument("Vision requests require at least one image.")
        if kind == MessageKind.TEXT and not (content.text and content.text.strip()):
            raise InvalidArgument("Input text cannot be null or empty.")

        backend = self.normalize_backend(backend_id)
        if seed is None:
            seed = NO_SEED

        logger.debug(
            f"Translating {kind.value} request for backend={backend}, model={model}, "
            f"media={len(content.media)}, seed={seed}"
        )

        if backend == BackendId.OLLAMA.value:
            return self.build_ollama_body(content, model, kind, seed)
        if backend == BackendId.ANTHROPIC.value:
            return self.build_anthropic_body(content, model, kind, seed)
        if backend in OPENAI_COMPATIBLE_BACKENDS:
            return self.build_openai_body(backend, content, model, kind, seed)
        raise UnsupportedBackend(backend_id)

    def build_ollama_body(
        self,
        content: MessageContent,
        model: str,
        kind: MessageKind,
        seed: int
    ) -> OllamaRequestBody:
        """Build an Ollama /api/chat body."""
        messages = []
        if content.instructions:
            messages.append(OllamaMessage(role="system", content=content.instructions))

        user_message = OllamaMessage(role="user", content=content.text)
        if kind == MessageKind.VISION:
            # Ollama wants bare base64, no data URL prefix
            user_message.images = [
                strip_data_url_prefix(self._compress(item, BackendId.OLLAMA.value))
                for item in content.media
            ]
        messages.append(user_message)

        options = OllamaOptions(temperature=OLLAMA_TEMPERATURE, top_p=OLLAMA_TOP_P)
        if seed != NO_SEED:
            options.seed = seed

        return OllamaRequestBody(
            model=model,
            messages=messages,
            stream=False,
            keep_alive=content.keep_alive,
            options=options
        )

    def build_openai_body(
        self,
        backend: str,
        content: MessageContent,
        model: str,
        kind: MessageKind,
        seed: int
    ) -> OpenAIRequestBody:
        """Build an OpenAI-compatible chat completions body."""
        messages = []
        if content.instructions:
            messages.append(OpenAIMessage(role="system", content=content.instructions))

        if kind == MessageKind.VISION:
            parts: List[Union[ImageUrlPart, TextPart]] = [
                ImageUrlPart(image_url=ImageUrl(url=self._image_url(item, backend)))
                for item in content.media
            ]
            parts.append(TextPart(text=content.text))
            messages.append(OpenAIMessage(role="user", content=parts))
        else:
            messages.append(OpenAIMessage(role="user", content=content.text))

        body = OpenAIRequestBody(
            model=model,
            messages=messages,
            max_tokens=OPENAI_MAX_TOKENS,
            temperature=OPENAI_TEMPERATURE,
            stream=False
        )
        if kind == MessageKind.TEXT:
            body.top_p = OPENAI_TOP_P
        if seed != NO_SEED:
            body.seed = seed
        return body

    def build_anthropic_body(
        self,
        content: MessageContent,
        model: str,
        kind: MessageKind,
        seed: int
    ) -> AnthropicRequestBody:
        """Build an Anthropic /v1/messages body.

        Anthropic takes the system prompt as a top-level field and has no seed
        parameter; a seed is ignored.
        """
        if seed != NO_SEED:
            logger.debug("Anthropic does not support seeds, ignoring seed")

        if kind == MessageKind.VISION:
            parts: List[Union[ImagePart, TextPart]] = [
                ImagePart(source=self._anthropic_source(item)) for item in content.media
            ]
            parts.append(TextPart(text=content.text))
            message = AnthropicMessage(role="user", content=parts)
        else:
            message = AnthropicMessage(role="user", content=content.text)

        return AnthropicRequestBody(
            model=model,
            max_tokens=ANTHROPIC_MAX_TOKENS,
            system=content.instructions or None,
            messages=[message]
        )

    def _compress(self, item: MediaItem, backend: str) -> str:
        return self.compressor.compress(item, BACKEND_IMAGE_FORMATS[backend])

    def _image_url(self, item: MediaItem, backend: str) -> str:
        """Return a URL or a data URL in the backend's preferred format."""
        if item.type == MediaType.URL:
            return item.data
        compressed = self.compressor.compress_media(item, BACKEND_IMAGE_FORMATS[backend])
        return to_data_url(compressed.data, compressed.media_type)

    def _anthropic_source(self, item: MediaItem) -> ImageSource:
        """Return an Anthropic image source; base64 sources are always PNG."""
        if item.type == MediaType.URL:
            return ImageSource(type="url", url=item.data)
        data = self._compress(item, BackendId.ANTHROPIC.value)
        return ImageSource(
            type="base64",
            media_type="image/png",
            data=strip_data_url_prefix(data)
        )
