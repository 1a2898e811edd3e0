"""Fan-out of shortening requests over a bounded set of asyncio tasks."""

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from ..shortener.base import Shortener
from .models import LinkSpec, ShortenRequest, ShortenResult
from .worker import shorten_one

logger = logging.getLogger(__name__)


def build_requests(
    issue_keys: Sequence[str], specs: Sequence[LinkSpec]
) -> list[ShortenRequest]:
    """Expand every (issue, spec) pair into a ShortenRequest.

    Args:
        issue_keys: Issue keys in issue order; the position is the issue index
        specs: Link specs to apply to every issue

    Returns:
        ``len(issue_keys) * len(specs)`` requests
    """
    return [
        ShortenRequest(
            issue_index=index, spec_name=spec.name, long_url=spec.expand(key)
        )
        for spec in specs
        for index, key in enumerate(issue_keys)
    ]


class Dispatcher:
    """Schedules one task per request and reports results on a queue.

    At most ``concurrency`` shortening calls run at once. Blocking shorteners
    run on a pool of ``concurrency`` threads owned by the dispatcher, so a
    call that outlived its timeout still holds its slot until it returns.
    Each task puts exactly one ShortenResult on the completion queue; a task
    that ends without reporting is converted into a failed result by its done
    callback.
    """

    def __init__(
        self,
        shortener: Shortener,
        queue: "asyncio.Queue[ShortenResult]",
        concurrency: int = 20,
        request_timeout: float | None = 10.0,
    ):
        """Initialize dispatcher.

        Args:
            shortener: Shortener client shared by all workers
            queue: Completion queue read by the aggregator
            concurrency: Maximum number of shortening calls in flight
            request_timeout: Seconds allowed for one shortening call
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.shortener = shortener
        self.queue = queue
        self.request_timeout = request_timeout
        self._semaphore = asyncio.Semaphore(concurrency)
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="jira-links-shorten"
        )
        self._tasks: set[asyncio.Task[None]] = set()
        self._closing = False

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    def dispatch(self, requests: Sequence[ShortenRequest]) -> list[asyncio.Task[None]]:
        """Schedule every request and return without waiting for any of them."""
        tasks = []
        for request in requests:
            task = asyncio.create_task(
                self._run(request),
                name=f"shorten-{request.issue_index}-{request.spec_name}",
            )
            task.add_done_callback(lambda t, r=request: self._on_done(r, t))
            self._tasks.add(task)
            tasks.append(task)

        logger.debug("Dispatched %d shortening request(s)", len(tasks))
        return tasks

    async def _run(self, request: ShortenRequest) -> None:
        async with self._semaphore:
            result = await shorten_one(
                request, self.shortener, self.request_timeout, self._executor
            )
        # Last statement: a task that raised never reported its result
        self.queue.put_nowait(result)

    def _on_done(self, request: ShortenRequest, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if self._closing:
            return

        if task.cancelled():
            error: BaseException | str = "Shortening task was cancelled"
        else:
            exc = task.exception()
            if exc is None:
                return
            error = exc

        logger.error(
            "Shortening task for %s link of issue index %d ended without a "
            "result: %s",
            request.spec_name,
            request.issue_index,
            error,
        )
        self.queue.put_nowait(ShortenResult.failure(request, error))

    async def cancel(self) -> None:
        """Cancel outstanding tasks and release the thread pool.

        Queued blocking calls are dropped; calls already running in a thread
        are not waited for.
        """
        self._closing = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            logger.debug("Cancelling %d outstanding shortening task(s)", len(tasks))
            await asyncio.gather(*tasks, return_exceptions=True)
        self._executor.shutdown(wait=False, cancel_futures=True)
