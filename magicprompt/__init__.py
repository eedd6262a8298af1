"""MagicPrompt: chat, vision and prompt enhancement through pluggable LLM backends."""

__version__ = "1.0.0"
