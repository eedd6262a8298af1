"""Configuration management for the MagicPrompt backend core."""

import logging
from typing import Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from magicprompt.schemas.error_models import ConfigurationError
from magicprompt.schemas.settings_models import InstructionSet


class BackendConfig(BaseModel):
    """Connection details for one LLM backend."""
    base_url: str = Field(..., description="Base URL of the backend API")
    endpoints: Dict[str, str] = Field(
        default_factory=dict,
        description="Endpoint suffixes keyed by endpoint type (chat, models)"
    )
    api_key: Optional[str] = Field(None, description="API key sent with requests")


def default_backends() -> Dict[str, BackendConfig]:
    """Build the default backend table."""
    return {
        "ollama": BackendConfig(
            base_url="http://localhost:11434",
            endpoints={"chat": "/api/chat", "models": "/api/tags"}
        ),
        "openaiapi": BackendConfig(
            base_url="http://localhost:11434",
            endpoints={"chat": "v1/chat/completions", "models": "/v1/models"}
        ),
        "openai": BackendConfig(
            base_url="https://api.openai.com",
            endpoints={"chat": "v1/chat/completions", "models": "v1/models"}
        ),
        "anthropic": BackendConfig(
            base_url="https://api.anthropic.com",
            endpoints={"chat": "v1/messages", "models": "v1/models"}
        ),
        "openrouter": BackendConfig(
            base_url="https://openrouter.ai",
            endpoints={"chat": "/api/v1/chat/completions", "models": "/api/v1/models"}
        ),
        "grok": BackendConfig(
            base_url="https://api.x.ai",
            endpoints={"chat": "/v1/chat/completions", "models": "/v1/models"}
        ),
    }


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="MAGICPROMPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        protected_namespaces=(),
    )

    # Backend selection
    backend: str = Field(
        default="ollama",
        description="Backend used for text requests"
    )
    model: str = Field(
        default="llama3.2-vision:latest",
        description="Model used for text requests"
    )
    vision_backend: str = Field(
        default="ollama",
        description="Backend used for requests carrying an image"
    )
    vision_model: str = Field(
        default="llama3.2-vision:latest",
        description="Model used for requests carrying an image"
    )
    unload_model: bool = Field(
        default=False,
        description="Ask Ollama to unload the model after each response"
    )
    instructions: InstructionSet = Field(
        default_factory=InstructionSet,
        description="Instruction texts per action"
    )
    backends: Dict[str, BackendConfig] = Field(
        default_factory=default_backends,
        description="Backend connection table"
    )

    # Transport configuration
    request_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for backend requests"
    )

    # Prompt cache configuration
    prompt_cache_enabled: bool = Field(
        default=True,
        description="Cache successful prompt enhancements"
    )
    prompt_cache_size: int = Field(
        default=1000,
        description="Maximum number of cached prompt enhancements"
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    # FastAPI configuration
    debug: bool = Field(
        default=False,
        description="Enable debug mode with docs endpoints"
    )

    # CORS configuration
    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed HTTP methods for CORS"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        description="Allowed headers for CORS"
    )


def resolve_endpoint(
    backends: Mapping[str, Union[BackendConfig, Mapping]],
    backend: str,
    endpoint_type: str
) -> str:
    """Build the full URL for a backend endpoint.

    Args:
        backends: Backend connection table
        backend: Backend id
        endpoint_type: Endpoint type ("chat" or "models")

    Returns:
        Base URL and endpoint suffix joined with a single slash

    Raises:
        ConfigurationError: If the backend or the endpoint is not configured
    """
    backend_key = (backend or "").lower()
    config = backends.get(backend_key) if backends else None
    if config is None:
        raise ConfigurationError(f"No configuration found for backend '{backend}'")

    if not isinstance(config, BackendConfig):
        config = BackendConfig.model_validate(config)

    suffix = config.endpoints.get(endpoint_type)
    if not config.base_url or not suffix:
        raise ConfigurationError(
            f"No '{endpoint_type}' endpoint configured for backend '{backend}'"
        )

    return f"{config.base_url.rstrip('/')}/{suffix.lstrip('/')}"


def get_api_key(
    backends: Mapping[str, Union[BackendConfig, Mapping]],
    backend: str
) -> Optional[str]:
    """Return the configured API key for a backend, if any."""
    config = backends.get((backend or "").lower()) if backends else None
    if config is None:
        return None
    if isinstance(config, BackendConfig):
        return config.api_key
    return config.get("api_key")


def configure_logging(level: str = "INFO") -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
