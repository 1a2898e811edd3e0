"""Interface every URL shortener client must provide."""

import asyncio
import inspect
from collections.abc import Awaitable
from concurrent.futures import Executor
from typing import Any, Protocol, runtime_checkable

from ..errors import ShortenerTimeoutError


@runtime_checkable
class Shortener(Protocol):
    """Anything with a ``shorten`` method returning the short URL.

    ``shorten`` may be a coroutine function or a plain blocking function;
    blocking implementations are run in a worker thread. Failures are
    signalled by raising.
    """

    def shorten(self, long_url: str) -> str | Awaitable[str]: ...


def _mark_started(started: "asyncio.Future[None]") -> None:
    if not started.done():
        started.set_result(None)


async def _wait(future: "asyncio.Future[Any]", timeout: float | None) -> Any:
    try:
        done, _ = await asyncio.wait((future,), timeout=timeout)
    except asyncio.CancelledError:
        future.cancel()
        raise
    if not done:
        future.cancel()
        raise ShortenerTimeoutError(timeout)
    return future.result()


async def call_shortener(
    shortener: Shortener,
    long_url: str,
    timeout: float | None = None,
    executor: Executor | None = None,
) -> str:
    """Invoke ``shortener.shorten`` without blocking the event loop.

    A blocking ``shorten`` runs on ``executor`` (the loop's default executor
    when None). Its timeout starts when a thread picks the call up, so time
    spent queued behind busy threads is not counted. A thread that outlives
    its timeout keeps running; its late answer is dropped.

    Args:
        shortener: Shortener client to call
        long_url: URL to shorten
        timeout: Seconds allowed for the call, None for no bound
        executor: Thread pool for blocking shorteners

    Returns:
        The short URL

    Raises:
        ShortenerTimeoutError: If the call gives no answer within ``timeout``
    """
    shorten = shortener.shorten
    if inspect.iscoroutinefunction(shorten):
        return await _wait(asyncio.ensure_future(shorten(long_url)), timeout)

    loop = asyncio.get_running_loop()
    started: asyncio.Future[None] = loop.create_future()

    def run() -> Any:
        loop.call_soon_threadsafe(_mark_started, started)
        return shorten(long_url)

    future = loop.run_in_executor(executor, run)
    try:
        await asyncio.wait((started, future), return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        future.cancel()
        raise
    finally:
        started.cancel()

    value = await _wait(future, timeout)
    if inspect.isawaitable(value):
        value = await _wait(asyncio.ensure_future(value), timeout)
    return value
