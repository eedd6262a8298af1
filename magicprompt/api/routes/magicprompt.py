"""MagicPrompt API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from magicprompt.schemas.api_models import ModelListResult, PromptRequest
from magicprompt.schemas.error_models import ServiceUnavailableError
from magicprompt.schemas.message_models import NormalizedResult
from magicprompt.services.magicprompt_service import MagicPromptService


logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/magicprompt", tags=["magicprompt"])


def get_magicprompt_service(request: Request) -> MagicPromptService:
    """Dependency returning the service created at startup.

    Raises:
        ServiceUnavailableError: If the service has not been created
    """
    service = getattr(request.app.state, "magicprompt_service", None)
    if service is None:
        raise ServiceUnavailableError("MagicPrompt service not initialized")
    return service


@router.post("/phone-home", response_model=NormalizedResult)
async def phone_home(
    request_data: PromptRequest,
    request: Request,
    service: MagicPromptService = Depends(get_magicprompt_service)
) -> NormalizedResult:
    """Send the user's input to the configured LLM and return its reply.

    Failures are reported in the body with success=false rather than as HTTP
    errors, so the UI can show the message.
    """
    request.app.state.request_count += 1
    request_id = getattr(request.state, "request_id", "unknown")

    logger.info(
        f"Request {request_id}: action={request_data.action}, "
        f"image={request_data.image is not None}, backend={request_data.backend or 'default'}"
    )

    result = await service.handle(request_data)

    if result.success:
        logger.info(f"Request {request_id}: completed ({len(result.response or '')} chars)")
    else:
        logger.warning(f"Request {request_id}: failed - {result.error}")
    return result


@router.get("/models", response_model=ModelListResult)
async def list_models(
    request: Request,
    backend: Optional[str] = Query(None, description="Backend to list models for"),
    service: MagicPromptService = Depends(get_magicprompt_service)
) -> ModelListResult:
    """List the models the given (or active) backend offers."""
    request_id = getattr(request.state, "request_id", "unknown")
    result = await service.list_models(backend)
    logger.info(
        f"Request {request_id}: listed {len(result.models)} models "
        f"for {result.backend} (success={result.success})"
    )
    return result


@router.get("/stats")
async def service_stats(
    service: MagicPromptService = Depends(get_magicprompt_service)
) -> dict:
    """Return service statistics."""
    return service.get_service_stats()
