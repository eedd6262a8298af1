"""Maps UI action tags to a backend, model, instructions and keep_alive."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from magicprompt.config import Settings
from magicprompt.schemas.error_models import InvalidArgument
from magicprompt.schemas.message_models import BackendId, MessageKind
from magicprompt.schemas.settings_models import InstructionSet


logger = logging.getLogger(__name__)


# Instruction key used by default for each action
ACTION_INSTRUCTION_KEYS = {
    "chat": "chat",
    "vision": "vision",
    "prompt": "prompt",
    "caption": "caption",
    "generate-instruction": "instructiongen",
}

IMAGE_ACTIONS = frozenset({"vision", "caption"})

VARIABLE_TAG = re.compile(r"<var:(?P<name>[^<>]+)>", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedAction:
    """Everything the dispatcher needs that is owned by the settings."""
    backend: str
    model: str
    kind: MessageKind
    instructions: Optional[str]
    keep_alive: Optional[int]


def substitute_variables(instructions: Optional[str], variables: Optional[Dict[str, str]]) -> Optional[str]:
    """Replace <var:name> tags with values; unknown tags are left in place."""
    if not instructions or not variables or "<var:" not in instructions.lower():
        return instructions

    def replace(match: "re.Match[str]") -> str:
        name = match.group("name")
        if name in variables:
            return variables[name]
        logger.warning(f"Instruction variable '{name}' not found for substitution")
        return match.group(0)

    return VARIABLE_TAG.sub(replace, instructions)


class ActionResolver:
    """Resolves an action into backend, model, kind, instructions and keep_alive."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def resolve(
        self,
        action: str,
        has_image: bool = False,
        instruction_id: Optional[str] = None,
        variables: Optional[Dict[str, str]] = None,
        backend: Optional[str] = None,
        model: Optional[str] = None
    ) -> ResolvedAction:
        """Resolve an action tag against the current settings.

        Args:
            action: Action tag (chat, vision, prompt, caption, generate-instruction)
            has_image: Whether the request carries an image
            instruction_id: Custom or base instruction overriding the default
            variables: Values for <var:name> tags
            backend: Backend override
            model: Model override

        Returns:
            ResolvedAction

        Raises:
            InvalidArgument: If the action is unknown, an image action has no
                image, or no model is configured
        """
        if action not in ACTION_INSTRUCTION_KEYS:
            raise InvalidArgument(f"Unknown action: {action}")
        if action in IMAGE_ACTIONS and not has_image:
            raise InvalidArgument("Please upload an image first to use vision mode.")

        kind = MessageKind.VISION if has_image else MessageKind.TEXT
        if kind == MessageKind.VISION:
            resolved_backend = backend or self.settings.vision_backend
            resolved_model = model or self.settings.vision_model
        else:
            resolved_backend = backend or self.settings.backend
            resolved_model = model or self.settings.model
        resolved_backend = (resolved_backend or "").lower()

        if not resolved_model:
            raise InvalidArgument("Please select a model first.")

        instructions = self.resolve_instructions(action, instruction_id, variables)

        keep_alive = None
        if resolved_backend == BackendId.OLLAMA.value and self.settings.unload_model:
            keep_alive = 0

        logger.debug(
            f"Resolved action={action} to backend={resolved_backend}, "
            f"model={resolved_model}, kind={kind.value}"
        )
        return ResolvedAction(
            backend=resolved_backend,
            model=resolved_model,
            kind=kind,
            instructions=instructions,
            keep_alive=keep_alive
        )

    def resolve_instructions(
        self,
        action: str,
        instruction_id: Optional[str] = None,
        variables: Optional[Dict[str, str]] = None
    ) -> Optional[str]:
        """Find the instruction text for an action.

        Lookup order: custom instruction by key, custom instruction by title,
        base instruction by key, the action's default instruction, then the
        prompt instruction.
        """
        instructions: InstructionSet = self.settings.instructions
        key = instruction_id.strip() if instruction_id and instruction_id.strip() else None

        if key:
            text = (
                self._custom_by_key(instructions, key, variables)
                or self._custom_by_title(instructions, key, variables)
                or instructions.get_base(key)
            )
            if text:
                return text
            logger.debug(f"Instruction '{key}' not found, using the {action} default")

        default = instructions.get_base(ACTION_INSTRUCTION_KEYS.get(action, "prompt"))
        return default or instructions.get_base("prompt")

    @staticmethod
    def _custom_by_key(
        instructions: InstructionSet,
        key: str,
        variables: Optional[Dict[str, str]]
    ) -> Optional[str]:
        custom = instructions.custom.get(key)
        if custom is None or not custom.content.strip():
            return None
        logger.debug(f"Using custom instruction \"{custom.title}\" (matched by key)")
        return substitute_variables(custom.content, variables)

    @staticmethod
    def _custom_by_title(
        instructions: InstructionSet,
        title: str,
        variables: Optional[Dict[str, str]]
    ) -> Optional[str]:
        for custom in instructions.custom.values():
            if custom.title.lower() != title.lower() or not custom.content.strip():
                continue
            logger.debug(f"Using custom instruction \"{custom.title}\" (matched by title)")
            return substitute_variables(custom.content, variables)
        return None
