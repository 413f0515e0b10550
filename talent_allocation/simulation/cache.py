import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RunCache:
    """
    Memoizing cache that lives for one run.

    Entries are the in-flight fetch tasks keyed by the full key string, so
    concurrent requests for the same key share a single fetch. Failed
    fetches are evicted and retried by the next caller.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, "asyncio.Task[Any]"] = {}
        self.hits = 0
        self.misses = 0

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        task = self._entries.get(key)
        if task is not None:
            self.hits += 1
        else:
            self.misses += 1
            task = asyncio.ensure_future(fetch())
            self._entries[key] = task

        try:
            # shield so a timed out waiter does not cancel a fetch others share
            return await asyncio.shield(task)
        except BaseException:
            failed = task.done() and (task.cancelled() or task.exception() is not None)
            if failed and self._entries.get(key) is task:
                del self._entries[key]
                logger.debug(f"Evicted failed cache entry {key}")
            raise

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "size": len(self._entries)}
