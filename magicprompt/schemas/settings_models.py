"""Instruction settings models."""

from typing import Dict, Optional
from pydantic import BaseModel, Field


DEFAULT_CHAT_INSTRUCTION = (
    "You are a friendly assistant for a Stable Diffusion image generation tool. "
    "Answer questions and chat naturally, and include practical tips on writing "
    "good image generation prompts where they help."
)

DEFAULT_VISION_INSTRUCTION = (
    "Analyze the image and answer the user's questions about it. Describe what "
    "you see accurately and in detail."
)

DEFAULT_CAPTION_INSTRUCTION = (
    "Respond only with a detailed caption for the image. Only describe what is in "
    "the image without any other text or comments. Format the description as a "
    "prompt that can be used for Stable Diffusion image generation. Example: a "
    "frosty mug of amber beer sits atop a rustic wooden table, surrounded by empty "
    "stools in an old German beer hall, soft lighting from a hanging pendant lamp"
)

DEFAULT_PROMPT_INSTRUCTION = (
    "Only respond with an enhanced prompt for Stable Diffusion based on the user's "
    "input. Example:\nUser: beautiful radiating glowing trashcan in a clean "
    "immaculate city park\nAI: surrealistic scene of a trash can emitting bright, "
    "colorful light in the middle of an immaculate city park, photorealism, highly "
    "detailed, trending on artstation"
)

DEFAULT_INSTRUCTIONGEN_INSTRUCTION = (
    "Write a clear, reusable system instruction for a language model based on the "
    "user's description of the task. Respond only with the instruction text."
)


class CustomInstruction(BaseModel):
    """User-defined instruction addressable by key or title."""
    title: str = Field(..., description="Display title of the instruction")
    content: str = Field(..., description="Instruction text")
    categories: list[str] = Field(default_factory=list, description="Actions the instruction applies to")


class InstructionSet(BaseModel):
    """Instruction texts used for each action."""
    chat: Optional[str] = Field(default=DEFAULT_CHAT_INSTRUCTION, description="Chat instruction")
    vision: Optional[str] = Field(default=DEFAULT_VISION_INSTRUCTION, description="Vision instruction")
    caption: Optional[str] = Field(default=DEFAULT_CAPTION_INSTRUCTION, description="Caption instruction")
    prompt: Optional[str] = Field(default=DEFAULT_PROMPT_INSTRUCTION, description="Prompt enhancement instruction")
    instructiongen: Optional[str] = Field(
        default=DEFAULT_INSTRUCTIONGEN_INSTRUCTION,
        description="Instruction used to generate new instructions"
    )
    custom: Dict[str, CustomInstruction] = Field(
        default_factory=dict,
        description="Custom instructions keyed by id"
    )

    def get_base(self, key: str) -> Optional[str]:
        """Return a base instruction by key, or None when unknown or blank."""
        if not key or key == "custom":
            return None
        value = getattr(self, key.lower(), None)
        if isinstance(value, str) and value.strip():
            return value
        return None
