"""Pydantic schemas package for message, request body and error models."""

from .message_models import (
    BackendId,
    MediaType,
    MessageKind,
    MediaItem,
    MessageContent,
    TextPart,
    OllamaMessage,
    OllamaOptions,
    OllamaRequestBody,
    ImageUrl,
    ImageUrlPart,
    OpenAIMessage,
    OpenAIRequestBody,
    ImageSource,
    ImagePart,
    AnthropicMessage,
    AnthropicRequestBody,
    RequestBody,
    NormalizedResult,
)
from .settings_models import (
    CustomInstruction,
    InstructionSet,
)
from .api_models import (
    PromptRequest,
    ModelInfo,
    ModelListResult,
)
from .error_models import (
    ErrorDetail,
    ErrorResponse,
    MagicPromptError,
    InvalidArgument,
    UnsupportedBackend,
    ConfigurationError,
    TransportError,
    MalformedResponse,
    APIException,
    InvalidRequestError,
    ValidationError,
    InternalServerError,
    ServiceUnavailableError,
    create_error_response,
)

__all__ = [
    # Message models
    "BackendId",
    "MediaType",
    "MessageKind",
    "MediaItem",
    "MessageContent",
    "NormalizedResult",
    # Request bodies
    "TextPart",
    "OllamaMessage",
    "OllamaOptions",
    "OllamaRequestBody",
    "ImageUrl",
    "ImageUrlPart",
    "OpenAIMessage",
    "OpenAIRequestBody",
    "ImageSource",
    "ImagePart",
    "AnthropicMessage",
    "AnthropicRequestBody",
    "RequestBody",
    # Settings models
    "CustomInstruction",
    "InstructionSet",
    # API models
    "PromptRequest",
    "ModelInfo",
    "ModelListResult",
    # Error models
    "ErrorDetail",
    "ErrorResponse",
    # Exception classes
    "MagicPromptError",
    "InvalidArgument",
    "UnsupportedBackend",
    "ConfigurationError",
    "TransportError",
    "MalformedResponse",
    "APIException",
    "InvalidRequestError",
    "ValidationError",
    "InternalServerError",
    "ServiceUnavailableError",
    # Utility functions
    "create_error_response",
]
