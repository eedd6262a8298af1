"""Message content, backend request body and result models."""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class BackendId(str, Enum):
    """Known LLM backends."""
    OLLAMA = "ollama"
    OPENAI = "openai"
    OPENAIAPI = "openaiapi"
    OPENROUTER = "openrouter"
    ANTHROPIC = "anthropic"
    GROK = "grok"


class MediaType(str, Enum):
    """How a media item carries its payload."""
    BASE64 = "base64"
    URL = "url"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class MessageKind(str, Enum):
    """Whether a request carries image data."""
    TEXT = "Text"
    VISION = "Vision"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class MediaItem(BaseModel):
    """A single image (or other media) attached to a message."""
    model_config = ConfigDict(populate_by_name=True)

    type: MediaType = Field(default=MediaType.BASE64, description="Payload kind")
    data: str = Field(..., description="Raw base64, data URL or URL")
    media_type: str = Field(
        default="image/jpeg",
        alias="mediaType",
        description="MIME type of the media"
    )


class MessageContent(BaseModel):
    """Uniform message representation consumed by the translator."""
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", description="User text")
    instructions: Optional[str] = Field(None, description="System instructions")
    media: List[MediaItem] = Field(default_factory=list, description="Attached media")
    keep_alive: Optional[int] = Field(
        None,
        alias="keepAlive",
        description="Ollama keep_alive value"
    )


# Shared content parts
class TextPart(BaseModel):
    """Text content part."""
    type: Literal["text"] = "text"
    text: str


# Ollama wire models
class OllamaMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str
    images: Optional[List[str]] = None


class OllamaOptions(BaseModel):
    temperature: float = 1.0
    top_p: float = 0.9
    seed: Optional[int] = None


class OllamaRequestBody(BaseModel):
    """Body for Ollama's /api/chat."""
    kind: Literal["ollama"] = Field(default="ollama", exclude=True)
    model: str
    messages: List[OllamaMessage]
    stream: bool = False
    keep_alive: Optional[int] = None
    options: OllamaOptions = Field(default_factory=OllamaOptions)

    def to_wire(self) -> Dict[str, Any]:
        # keep_alive is always sent, null included
        return {
            "model": self.model,
            "messages": [message.model_dump(exclude_none=True) for message in self.messages],
            "stream": self.stream,
            "keep_alive": self.keep_alive,
            "options": self.options.model_dump(exclude_none=True),
        }


# OpenAI-compatible wire models
class ImageUrl(BaseModel):
    url: str


class ImageUrlPart(BaseModel):
    """Image content part carrying a URL or data URL."""
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class OpenAIMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: Union[str, List[Union[ImageUrlPart, TextPart]]]


class OpenAIRequestBody(BaseModel):
    """Body for OpenAI-compatible /chat/completions endpoints."""
    kind: Literal["openai"] = Field(default="openai", exclude=True)
    model: str
    messages: List[OpenAIMessage]
    max_tokens: int = 1000
    temperature: float = 1.0
    top_p: Optional[float] = None
    stream: bool = False
    seed: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# Anthropic wire models
class ImageSource(BaseModel):
    type: Literal["base64", "url"] = "base64"
    media_type: Optional[str] = None
    data: Optional[str] = None
    url: Optional[str] = None


class ImagePart(BaseModel):
    """Anthropic image content block."""
    type: Literal["image"] = "image"
    source: ImageSource


class AnthropicMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: Union[str, List[Union[ImagePart, TextPart]]]


class AnthropicRequestBody(BaseModel):
    """Body for Anthropic's /v1/messages."""
    kind: Literal["anthropic"] = Field(default="anthropic", exclude=True)
    model: str
    max_tokens: int = 1024
    system: Optional[str] = None
    messages: List[AnthropicMessage]

    def to_wire(self) -> Dict[str, Any]:
        # system is always sent, null included
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": self.system,
            "messages": [message.model_dump(exclude_none=True) for message in self.messages],
        }


RequestBody = Annotated[
    Union[OllamaRequestBody, OpenAIRequestBody, AnthropicRequestBody],
    Field(discriminator="kind")
]


class NormalizedResult(BaseModel):
    """Uniform outcome of a chat or vision request."""
    success: bool = Field(..., description="Whether the request produced text")
    response: Optional[str] = Field(None, description="Generated text")
    error: Optional[str] = Field(None, description="Readable one-line error message")

    @classmethod
    def ok(cls, response: str) -> "NormalizedResult":
        return cls(success=True, response=response)

    @classmethod
    def failure(cls, error: Optional[str]) -> "NormalizedResult":
        return cls(success=False, error=error or "Unknown error")
