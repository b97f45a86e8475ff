# app/core/background.py
import logging
import zlib
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class BackgroundRunner:
    """
    Fire-and-forget task runner for cache maintenance.

    Tasks run off the request path. Whatever they raise is logged
    and dropped; the caller never sees it.

    Work is spread over lanes, each a single worker. Tasks submitted
    with the same key always go to the same lane and run in submission
    order, so a cache fill never lands after the invalidation that was
    queued behind it.
    """

    def __init__(self, *lanes: Executor):
        if not lanes:
            raise ValueError("BackgroundRunner needs at least one lane")
        self._lanes = lanes

    @classmethod
    def with_threads(cls, lanes: int) -> "BackgroundRunner":
        return cls(
            *(
                ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"cache-{i}")
                for i in range(max(lanes, 1))
            )
        )

    def lane_for(self, key: str | None) -> Executor:
        if key is None:
            return self._lanes[0]
        return self._lanes[zlib.crc32(key.encode()) % len(self._lanes)]

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        key: str | None = None,
        description: str = "",
    ) -> Future | None:
        label = description or getattr(fn, "__name__", repr(fn))
        try:
            future = self.lane_for(key).submit(fn, *args)
        except RuntimeError as e:
            # executor already shut down
            logger.warning("Background task %s not scheduled: %s", label, e)
            return None
        future.add_done_callback(lambda f: self._log_failure(f, label))
        return future

    @staticmethod
    def _log_failure(future: Future, label: str) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Background task %s failed: %s", label, exc, exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        for lane in self._lanes:
            lane.shutdown(wait=wait)
