"""Test configuration and fixtures."""

import asyncio
import hashlib
import random
import re
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import pytest

from jira_links.links.models import LinkSpec

JIRA_TEMPLATE = "https://x/browse/${issueName}"
STASH_TEMPLATE = "https://y/repos/app/browse?at=${issueName}"


class CountingShortener:
    """Returns http://sho.rt/<n> for the n-th call."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def shorten(self, long_url: str) -> str:
        self.calls.append(long_url)
        return f"http://sho.rt/{len(self.calls)}"


class DeterministicShortener:
    """Derives the short URL from the long URL only."""

    async def shorten(self, long_url: str) -> str:
        digest = hashlib.sha1(long_url.encode()).hexdigest()[:8]
        return f"https://sho.rt/{digest}"


class EchoShortener:
    """Sleeps a random amount, then embeds the long URL in the short one."""

    def __init__(self, seed: int = 7, max_delay: float = 0.02) -> None:
        self._random = random.Random(seed)
        self.max_delay = max_delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def shorten(self, long_url: str) -> str:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._random.uniform(0, self.max_delay))
        finally:
            self.in_flight -= 1
        return f"https://sho.rt/{long_url}"


class FailingShortener(EchoShortener):
    """Fails for the given long URLs and echoes every other one."""

    def __init__(self, failing: set[str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.failing = failing

    async def shorten(self, long_url: str) -> str:
        if long_url in self.failing:
            raise ConnectionError(f"service unavailable for {long_url}")
        return await super().shorten(long_url)


class HangingShortener(EchoShortener):
    """Never answers for the given long URLs."""

    def __init__(self, hanging: set[str], **kwargs: Any) -> None:
        super().__init__(max_delay=0, **kwargs)
        self.hanging = hanging

    async def shorten(self, long_url: str) -> str:
        if long_url in self.hanging:
            await asyncio.Event().wait()
        return await super().shorten(long_url)


class BlockingShortener:
    """Synchronous shortener, as a blocking HTTP client would be."""

    def shorten(self, long_url: str) -> str:
        return f"https://sync.sho.rt/{long_url.rsplit('/', 1)[-1]}"


class StallingShortener(BlockingShortener):
    """Blocking shortener that sleeps, or stalls on some issue keys.

    Stalled calls wait until ``release()`` or ``stall_for`` seconds. Tracks
    how many calls are inside ``shorten`` at once.
    """

    def __init__(
        self,
        stalled: Iterable[str] = (),
        delay: float = 0.0,
        stall_for: float = 5.0,
    ) -> None:
        self.stalled = set(stalled)
        self.delay = delay
        self.stall_for = stall_for
        self.in_flight = 0
        self.max_in_flight = 0
        self._released = threading.Event()
        self._lock = threading.Lock()

    def release(self) -> None:
        self._released.set()

    def shorten(self, long_url: str) -> str:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if re.split(r"[/=]", long_url)[-1] in self.stalled:
                self._released.wait(self.stall_for)
            elif self.delay:
                time.sleep(self.delay)
            return super().shorten(long_url)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def link_specs() -> list[LinkSpec]:
    """The jira and stash specs used throughout the tests."""
    return [
        LinkSpec(name="jira", url_template=JIRA_TEMPLATE),
        LinkSpec(name="stash", url_template=STASH_TEMPLATE),
    ]


@pytest.fixture
def make_issues() -> Callable[..., dict[str, Any]]:
    """Build a Jira search payload with the given number of issues."""

    def _make(count: int, project: str = "AB") -> dict[str, Any]:
        return {
            "startAt": 0,
            "total": count,
            "issues": [
                {"key": f"{project}-{n}", "fields": {"summary": f"Issue {n}"}}
                for n in range(1, count + 1)
            ],
        }

    return _make


@pytest.fixture
def sample_issues(make_issues: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """Two issues, AB-1 and AB-2."""
    return make_issues(2)


@pytest.fixture
def counting_shortener() -> CountingShortener:
    return CountingShortener()


@pytest.fixture
def deterministic_shortener() -> DeterministicShortener:
    return DeterministicShortener()


@pytest.fixture
def echo_shortener() -> EchoShortener:
    return EchoShortener()


@pytest.fixture
def failing_shortener_factory() -> Callable[..., FailingShortener]:
    return FailingShortener


@pytest.fixture
def hanging_shortener_factory() -> Callable[..., HangingShortener]:
    return HangingShortener


@pytest.fixture
def blocking_shortener() -> BlockingShortener:
    return BlockingShortener()


@pytest.fixture
def stalling_shortener_factory() -> Iterator[Callable[..., StallingShortener]]:
    """Build stalling shorteners and release their threads after the test."""
    created: list[StallingShortener] = []

    def _make(*args: Any, **kwargs: Any) -> StallingShortener:
        shortener = StallingShortener(*args, **kwargs)
        created.append(shortener)
        return shortener

    yield _make
    for shortener in created:
        shortener.release()
