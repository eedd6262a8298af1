"""API routers."""

from .magicprompt import router as magicprompt_router

__all__ = ["magicprompt_router"]
