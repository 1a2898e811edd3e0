"""Tests for the single-pair shortening worker."""

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from jira_links.errors import ShortenerError
from jira_links.links.models import LinkStatus, ShortenRequest
from jira_links.links.worker import shorten_one


@pytest.fixture
def request_() -> ShortenRequest:
    return ShortenRequest(
        issue_index=3, spec_name="jira", long_url="https://x/browse/AB-4"
    )


class TestShortenOne:
    """Test that every outcome becomes exactly one result."""

    @pytest.mark.asyncio
    async def test_success(self, request_: ShortenRequest) -> None:
        """Test a successful call."""
        shortener = Mock()
        shortener.shorten = AsyncMock(return_value="https://bit.ly/abc")

        result = await shorten_one(request_, shortener, timeout=1)

        shortener.shorten.assert_awaited_once_with("https://x/browse/AB-4")
        assert result.ok
        assert result.short_url == "https://bit.ly/abc"
        assert (result.issue_index, result.spec_name) == (3, "jira")
        assert result.error is None

    @pytest.mark.asyncio
    async def test_service_error_is_carried(self, request_: ShortenRequest) -> None:
        """Test that a failing call yields a failed result, not an exception."""
        shortener = Mock()
        shortener.shorten = AsyncMock(
            side_effect=ShortenerError("Bitly returned 500", status_code=500)
        )

        result = await shorten_one(request_, shortener, timeout=1)

        assert result.status is LinkStatus.FAILED
        assert result.short_url is None
        assert result.error == "Bitly returned 500"
        assert result.error_type == "ShortenerError"
        assert result.long_url == "https://x/browse/AB-4"

    @pytest.mark.asyncio
    async def test_timeout(
        self, request_: ShortenRequest, hanging_shortener_factory: Any
    ) -> None:
        """Test that a call exceeding the timeout yields a timed-out result."""
        shortener = hanging_shortener_factory({request_.long_url})

        result = await asyncio.wait_for(
            shorten_one(request_, shortener, timeout=0.05), 2
        )

        assert result.status is LinkStatus.TIMED_OUT
        assert "0.05" in result.error

    @pytest.mark.asyncio
    async def test_empty_url_is_failure(self, request_: ShortenRequest) -> None:
        """Test that an empty answer is not mistaken for success."""
        shortener = Mock()
        shortener.shorten = AsyncMock(return_value="")

        result = await shorten_one(request_, shortener)

        assert result.status is LinkStatus.FAILED
        assert result.error == "Shortener returned an empty URL"

    @pytest.mark.asyncio
    async def test_blocking_shortener(
        self, request_: ShortenRequest, blocking_shortener: Any
    ) -> None:
        """Test that a synchronous shortener runs off the event loop."""
        result = await shorten_one(request_, blocking_shortener, timeout=1)

        assert result.short_url == "https://sync.sho.rt/AB-4"

    @pytest.mark.asyncio
    async def test_shortener_raised_timeout_is_a_failure(
        self, request_: ShortenRequest
    ) -> None:
        """Test that a TimeoutError from the client keeps its own message."""
        shortener = Mock()
        shortener.shorten = AsyncMock(side_effect=TimeoutError("read timed out"))

        result = await shorten_one(request_, shortener)

        assert result.status is LinkStatus.FAILED
        assert result.error == "read timed out"
        assert result.error_type == "TimeoutError"

    @pytest.mark.asyncio
    async def test_stalled_blocking_call_times_out(
        self, request_: ShortenRequest, stalling_shortener_factory: Any
    ) -> None:
        """Test that a hung blocking call is reported without waiting for it."""
        shortener = stalling_shortener_factory({"AB-4"})

        executor = ThreadPoolExecutor(max_workers=1)
        started = time.monotonic()
        try:
            result = await shorten_one(
                request_, shortener, timeout=0.1, executor=executor
            )
        finally:
            executor.shutdown(wait=False)

        assert time.monotonic() - started < 1.0
        assert result.status is LinkStatus.TIMED_OUT
        assert result.error == "No response within 0.1s"

    @pytest.mark.asyncio
    async def test_time_queued_for_a_thread_is_not_counted(
        self, stalling_shortener_factory: Any
    ) -> None:
        """Test that the timeout starts once a thread runs the call."""
        shortener = stalling_shortener_factory(delay=0.4)
        requests = [
            ShortenRequest(
                issue_index=n, spec_name="jira", long_url=f"https://x/browse/AB-{n}"
            )
            for n in range(2)
        ]
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            results = await asyncio.gather(
                *(
                    shorten_one(request, shortener, timeout=0.6, executor=executor)
                    for request in requests
                )
            )
        finally:
            executor.shutdown(wait=False)

        assert [result.status for result in results] == [LinkStatus.SHORTENED] * 2
        assert shortener.max_in_flight == 1
