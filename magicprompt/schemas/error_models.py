"""Error response models and custom exceptions."""

from typing import Optional, Any, Dict
from pydantic import BaseModel, Field
from fastapi import HTTPException


class ErrorDetail(BaseModel):
    """Error detail following OpenAI format."""
    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Error type identifier")
    param: Optional[str] = Field(None, description="Parameter that caused the error")
    code: Optional[str] = Field(None, description="Error code for programmatic handling")


class ErrorResponse(BaseModel):
    """OpenAI-compatible error response."""
    error: ErrorDetail = Field(..., description="Error details")


# Domain exceptions raised by the translation core
class MagicPromptError(Exception):
    """Base class for errors raised while building or sending a request."""

    error_type = "magicprompt_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgument(MagicPromptError):
    """Bad or missing input to translation."""

    error_type = "invalid_argument"


class UnsupportedBackend(MagicPromptError):
    """Unknown backend id."""

    error_type = "unsupported_backend"

    def __init__(self, backend: Optional[str]):
        self.backend = backend
        super().__init__(f"Unsupported backend: {backend}")


class ConfigurationError(MagicPromptError):
    """Missing backend or endpoint configuration."""

    error_type = "configuration_error"


class TransportError(MagicPromptError):
    """Network or HTTP failure talking to a backend."""

    error_type = "transport_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(MagicPromptError):
    """Backend response did not have the expected shape."""

    error_type = "malformed_response"

    def __init__(self, message: str = "malformed response"):
        super().__init__(message)


# HTTP exceptions raised by the API layer
class APIException(HTTPException):
    """Base exception for OpenAI-style HTTP errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_type: str,
        param: Optional[str] = None,
        code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_type = error_type
        self.param = param
        self.code = code

        error_response = ErrorResponse(
            error=ErrorDetail(
                message=message,
                type=error_type,
                param=param,
                code=code
            )
        )

        super().__init__(
            status_code=status_code,
            detail=error_response.model_dump(),
            headers=headers
        )


class InvalidRequestError(APIException):
    """400 Bad Request - Invalid parameters or malformed request."""

    def __init__(
        self,
        message: str,
        param: Optional[str] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            status_code=400,
            message=message,
            error_type="invalid_request_error",
            param=param,
            code=code
        )


class ValidationError(InvalidRequestError):
    """422 Unprocessable Entity - Parameter validation failed."""

    def __init__(
        self,
        message: str,
        param: Optional[str] = None,
        code: Optional[str] = None
    ):
        APIException.__init__(
            self,
            status_code=422,
            message=message,
            error_type="invalid_request_error",
            param=param,
            code=code
        )


class InternalServerError(APIException):
    """500 Internal Server Error."""

    def __init__(
        self,
        message: str = "Internal server error occurred",
        code: Optional[str] = None
    ):
        super().__init__(
            status_code=500,
            message=message,
            error_type="server_error",
            code=code
        )


class ServiceUnavailableError(APIException):
    """503 Service Unavailable - Service not initialized or unavailable."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        code: Optional[str] = None
    ):
        super().__init__(
            status_code=503,
            message=message,
            error_type="server_error",
            code=code
        )


def create_error_response(
    message: str,
    error_type: str,
    param: Optional[str] = None,
    code: Optional[str] = None
) -> Dict[str, Any]:
    """Create a standardized error response dictionary."""
    error_response = ErrorResponse(
        error=ErrorDetail(
            message=message,
            type=error_type,
            param=param,
            code=code
        )
    )
    return error_response.model_dump()
