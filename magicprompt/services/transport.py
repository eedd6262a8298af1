"""HTTP transport used to reach LLM backends."""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from magicprompt.models.error_classifier import classify_error, describe_error, ErrorCategory
from magicprompt.schemas.error_models import MalformedResponse, TransportError


logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Send JSON, get JSON."""

    async def post(
        self,
        url: str,
        json_body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        backend: Optional[str] = None
    ) -> Any:
        ...

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        backend: Optional[str] = None
    ) -> Any:
        ...


class HttpxTransport:
    """JSON transport backed by httpx.AsyncClient."""

    def __init__(
        self,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize HttpxTransport.

        Args:
            timeout: Request timeout in seconds
            client: Preconfigured AsyncClient (optional)
        """
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def post(
        self,
        url: str,
        json_body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        backend: Optional[str] = None
    ) -> Any:
        """POST a JSON body and return the decoded JSON response.

        Raises:
            TransportError: On network failure or a non-2xx status
            MalformedResponse: If the response body is not JSON
        """
        return await self._request("POST", url, headers, backend, json=json_body)

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        backend: Optional[str] = None
    ) -> Any:
        """GET a URL and return the decoded JSON response."""
        return await self._request("GET", url, headers, backend)

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        backend: Optional[str],
        **kwargs
    ) -> Any:
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {url} timed out: {e}")
            raise TransportError(
                describe_error(ErrorCategory.CONNECTIVITY, f"Request to {url} timed out", backend)
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(
                describe_error(ErrorCategory.CONNECTIVITY, f"{type(e).__name__}: {e}", backend)
            ) from e

        if response.is_error:
            message = classify_error(response.text, backend, response.status_code)
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise TransportError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {url} returned a non-JSON body: {response.text[:200]}")
            raise MalformedResponse() from e

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
