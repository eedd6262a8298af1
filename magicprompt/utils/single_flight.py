"""In-flight request de-duplication."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable


logger = logging.getLogger(__name__)


class SingleFlight:
    """Runs at most one call per key; concurrent callers share its result.

    The in-flight task is dropped as soon as it finishes, so a later call
    with the same key starts a fresh request.
    """

    def __init__(self):
        self._inflight: Dict[Hashable, asyncio.Task] = {}

    async def do(self, key: Hashable, fn: Callable[[], Awaitable[Any]]) -> Any:
        """Run fn for key, or wait for the call already running for key."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug(f"Joining in-flight call for {key!r}")

        # A cancelled waiter must not cancel the shared task
        return await asyncio.shield(task)

    def in_flight(self, key: Hashable) -> bool:
        """Check if a call for key is currently running."""
        return key in self._inflight

    def _forget(self, key: Hashable, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
