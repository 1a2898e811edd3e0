"""Shortening worker: one external call per (issue, spec) pair."""

import logging
from concurrent.futures import Executor

from ..errors import ShortenerTimeoutError
from ..shortener.base import Shortener, call_shortener
from .models import LinkStatus, ShortenRequest, ShortenResult

logger = logging.getLogger(__name__)


async def shorten_one(
    request: ShortenRequest,
    shortener: Shortener,
    timeout: float | None = None,
    executor: Executor | None = None,
) -> ShortenResult:
    """Shorten the long URL of a single request.

    Never raises for service failures: every outcome, including a timeout,
    is returned as a ShortenResult so the aggregator always receives exactly
    one result per request.

    Args:
        request: Request carrying the issue index, spec name and long URL
        shortener: Shortener client to call
        timeout: Seconds to wait for the service, None for no bound
        executor: Thread pool for blocking shorteners, see
            :func:`~jira_links.shortener.base.call_shortener`

    Returns:
        ShortenResult with status shortened, failed or timed_out
    """
    try:
        short_url = await call_shortener(shortener, request.long_url, timeout, executor)
    except ShortenerTimeoutError as e:
        logger.warning(
            "Timed out after %ss shortening %s link for issue index %d",
            timeout,
            request.spec_name,
            request.issue_index,
        )
        return ShortenResult.failure(request, str(e), LinkStatus.TIMED_OUT)
    except Exception as e:
        logger.warning(
            "Failed to shorten %s link for issue index %d: %s",
            request.spec_name,
            request.issue_index,
            e,
        )
        return ShortenResult.failure(request, e)

    if not short_url:
        return ShortenResult.failure(request, "Shortener returned an empty URL")

    logger.debug("Shortened %s -> %s", request.long_url, short_url)
    return ShortenResult.success(request, short_url)
