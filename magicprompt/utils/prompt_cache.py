"""LRU cache of prompt enhancements with request de-duplication."""

import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Optional

from magicprompt.schemas.message_models import NormalizedResult
from magicprompt.utils.single_flight import SingleFlight


logger = logging.getLogger(__name__)


DEFAULT_MAX_SIZE = 1000
DEFAULT_TIMEOUT = 90.0


def build_cache_key(prompt: Optional[str], instruction_id: Optional[str] = None) -> str:
    """Build a cache key that ignores case and whitespace in the prompt."""
    normalized = "".join((prompt or "").lower().split())
    if not instruction_id:
        return normalized
    return f"{normalized}||{instruction_id.lower()}"


class PromptCache:
    """Caches successful responses keyed by prompt and instruction id."""

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, timeout: float = DEFAULT_TIMEOUT):
        """Initialize PromptCache.

        Args:
            max_size: Maximum number of cached responses
            timeout: Seconds to wait for a request another caller is running
        """
        self.max_size = max_size
        self.timeout = timeout
        self._cache: "OrderedDict[str, str]" = OrderedDict()
        self._single_flight = SingleFlight()

    def get(self, prompt: str, instruction_id: Optional[str] = None) -> Optional[str]:
        """Return a cached response and mark it recently used, or None."""
        key = build_cache_key(prompt, instruction_id)
        if key not in self._cache:
            return None
        self._cache.move_to_end(key)
        logger.debug("Prompt cache hit")
        return self._cache[key]

    def put(self, prompt: str, instruction_id: Optional[str], response: str) -> None:
        """Store a response, evicting the least recently used entries."""
        key = build_cache_key(prompt, instruction_id)
        self._cache[key] = response
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)

    async def get_or_create(
        self,
        prompt: str,
        instruction_id: Optional[str],
        factory: Callable[[], Awaitable[NormalizedResult]]
    ) -> NormalizedResult:
        """Return a cached response or run factory once for concurrent callers.

        Only successful results are cached. Waiting longer than the timeout
        yields a failed result.
        """
        cached = self.get(prompt, instruction_id)
        if cached is not None:
            return NormalizedResult.ok(cached)

        key = build_cache_key(prompt, instruction_id)

        async def create() -> NormalizedResult:
            result = await factory()
            if result.success and result.response:
                self.put(prompt, instruction_id, result.response)
            return result

        try:
            return await asyncio.wait_for(self._single_flight.do(key, create), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out after {self.timeout}s waiting for pending prompt request")
            return NormalizedResult.failure(
                f"Timed out after {self.timeout:.0f}s waiting for the prompt request"
            )

    def clear(self) -> None:
        """Drop all cached responses."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
