"""Entry point: annotate a batch of issues with shortened links."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import IncompleteAnnotationError
from ..shortener.base import Shortener
from .aggregator import ResultAggregator
from .dispatcher import Dispatcher, build_requests
from .merger import extract_issue_keys, extract_issue_list, merge_annotations
from .models import LinkSpec, RoutingError, ShortenResult, ShortLink
from .registry import LinkSpecRegistry, default_registry
from .settings import AnnotatorSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationResult:
    """Annotated issue data plus what happened to every (issue, spec) pair."""

    data: Any
    table: tuple[Mapping[str, ShortLink], ...]
    spec_names: tuple[str, ...]
    expected: int
    received: int
    failures: list[ShortenResult] = field(default_factory=list)
    routing_errors: list[RoutingError] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every dispatched pair produced a routed result."""
        return self.received == self.expected and not self.missing

    @property
    def missing(self) -> list[tuple[int, str]]:
        return [
            (index, name)
            for index, links in enumerate(self.table)
            for name in self.spec_names
            if name not in links
        ]

    @property
    def shortened_count(self) -> int:
        return sum(
            1
            for links in self.table
            for link in links.values()
            if link.url is not None
        )


class LinkAnnotator:
    """Shortens every registered link for every issue of a payload."""

    def __init__(
        self,
        shortener: Shortener,
        registry: LinkSpecRegistry | None = None,
        settings: AnnotatorSettings | None = None,
    ):
        """Initialize annotator.

        Args:
            shortener: Client used for every shortening call
            registry: Link specs to apply; built from settings when None
            settings: Concurrency, timeout and field settings
        """
        self.shortener = shortener
        self.settings = settings or AnnotatorSettings()
        if registry is None:
            registry = default_registry(
                jira_url=self.settings.jira_url,
                stash_url=self.settings.stash_url,
                stash_project=self.settings.stash_project,
                stash_repo=self.settings.stash_repo,
                extra=self.settings.link_specs,
            )
        self.registry = registry

    async def annotate(self, data: Any) -> AnnotationResult:
        """Shorten all links and attach them to a copy of ``data``.

        Per-pair failures are recorded on the returned result. Only failures
        that make the whole run unusable are raised.

        Args:
            data: Jira search response (``{"issues": [...]}``) or issue list

        Returns:
            AnnotationResult with the annotated copy of ``data``

        Raises:
            InvalidIssueDataError: If the payload has no usable issues or keys
            IncompleteAnnotationError: If results are still missing when the
                aggregate timeout expires
            LinkShorteningError: In fail-fast mode, on the first failed pair
            AnnotationMismatchError: If the table and issue list disagree
        """
        settings = self.settings
        keys = extract_issue_keys(extract_issue_list(data), settings.key_field)
        specs = self.registry.specs()
        if not specs:
            logger.warning("No link specs registered, issues will get empty link maps")
        requests = build_requests(keys, specs)
        expected = len(requests)

        logger.info(
            "Shortening %d link(s) for %d issue(s) with concurrency %d",
            expected,
            len(keys),
            settings.concurrency,
        )

        queue: asyncio.Queue[ShortenResult] = asyncio.Queue()
        aggregator = ResultAggregator(
            len(keys), (spec.name for spec in specs), fail_fast=settings.fail_fast
        )
        dispatcher = Dispatcher(
            self.shortener,
            queue,
            concurrency=settings.concurrency,
            request_timeout=settings.request_timeout,
        )

        loop = asyncio.get_running_loop()
        deadline = None if settings.timeout is None else loop.time() + settings.timeout

        dispatcher.dispatch(requests)
        try:
            await aggregator.collect(queue, expected, deadline)
        except asyncio.TimeoutError:
            partial = self._build_result(data, aggregator, expected)
            logger.error(
                "Annotation timed out after %ss with %d/%d result(s)",
                settings.timeout,
                aggregator.received,
                expected,
            )
            raise IncompleteAnnotationError(
                aggregator.received, expected, partial
            ) from None
        finally:
            await dispatcher.cancel()

        result = self._build_result(data, aggregator, expected)
        logger.info(
            "Shortened %d/%d link(s) (%d failed, %d routing error(s))",
            result.shortened_count,
            expected,
            len(result.failures),
            len(result.routing_errors),
        )
        return result

    def _build_result(
        self, data: Any, aggregator: ResultAggregator, expected: int
    ) -> AnnotationResult:
        table = aggregator.table.freeze()
        return AnnotationResult(
            data=merge_annotations(data, table, self.settings.links_field),
            table=table,
            spec_names=aggregator.table.spec_names,
            expected=expected,
            received=aggregator.received,
            failures=list(aggregator.failures),
            routing_errors=list(aggregator.routing_errors),
        )


def _as_registry(
    specs: LinkSpecRegistry | Iterable[LinkSpec] | None,
) -> LinkSpecRegistry | None:
    if specs is None or isinstance(specs, LinkSpecRegistry):
        return specs
    return LinkSpecRegistry(specs)


async def annotate(
    data: Any,
    shortener: Shortener,
    specs: LinkSpecRegistry | Iterable[LinkSpec] | None = None,
    settings: AnnotatorSettings | None = None,
    **overrides: Any,
) -> AnnotationResult:
    """Annotate ``data`` with a short link per issue and spec.

    Args:
        data: Jira search response (``{"issues": [...]}``) or issue list
        shortener: Client used for every shortening call
        specs: Link specs to apply; built from settings when None
        settings: Base settings; defaults when None
        **overrides: Individual AnnotatorSettings fields to override

    Returns:
        AnnotationResult with the annotated copy of ``data``
    """
    settings = settings or AnnotatorSettings()
    if overrides:
        settings = AnnotatorSettings.model_validate(
            {**settings.model_dump(), **overrides}
        )
    annotator = LinkAnnotator(shortener, _as_registry(specs), settings)
    return await annotator.annotate(data)


def annotate_sync(
    data: Any,
    shortener: Shortener,
    specs: LinkSpecRegistry | Iterable[LinkSpec] | None = None,
    settings: AnnotatorSettings | None = None,
    **overrides: Any,
) -> AnnotationResult:
    """Blocking wrapper around :func:`annotate` for callers without a loop."""
    return asyncio.run(annotate(data, shortener, specs, settings, **overrides))
