"""Request and response models for the MagicPrompt HTTP surface."""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


Action = Literal["chat", "vision", "prompt", "caption", "generate-instruction"]


class PromptRequest(BaseModel):
    """Inbound call from the UI: free text, optional image and an action tag."""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    input: str = Field(default="", description="Free-text user input")
    image: Optional[str] = Field(None, description="Base64 image or data URL")
    media_type: str = Field(
        default="image/jpeg",
        alias="mediaType",
        description="MIME type of the attached image"
    )
    action: Action = Field(default="chat", description="Action tag")
    instruction_id: Optional[str] = Field(
        None,
        alias="instructionId",
        description="Custom or base instruction to use instead of the action default"
    )
    variables: Dict[str, str] = Field(
        default_factory=dict,
        description="Values for <var:name> tags in instructions"
    )
    backend: Optional[str] = Field(None, description="Backend override")
    model: Optional[str] = Field(None, description="Model override")
    seed: int = Field(default=-1, description="Sampling seed, -1 for none")

    @field_validator("image")
    @classmethod
    def blank_image_is_none(cls, v):
        """Treat an empty image string as no image."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ModelInfo(BaseModel):
    """A model offered by a backend."""
    id: str = Field(..., description="Model identifier sent in requests")
    name: Optional[str] = Field(None, description="Display name")


class ModelListResult(BaseModel):
    """Outcome of a model list fetch."""
    success: bool = Field(..., description="Whether the fetch succeeded")
    backend: Optional[str] = Field(None, description="Backend the models belong to")
    models: List[ModelInfo] = Field(default_factory=list, description="Available models")
    error: Optional[str] = Field(None, description="Readable error message")
