"""Services layer package for request dispatch and UI-facing orchestration."""

from .transport import HttpxTransport, Transport
from .request_dispatcher import RequestDispatcher, build_headers
from .action_resolver import ActionResolver, ResolvedAction, substitute_variables
from .model_list_provider import ModelListProvider, parse_models
from .magicprompt_service import MagicPromptService

__all__ = [
    "HttpxTransport",
    "Transport",
    "RequestDispatcher",
    "build_headers",
    "ActionResolver",
    "ResolvedAction",
    "substitute_variables",
    "ModelListProvider",
    "parse_models",
    "MagicPromptService",
]
