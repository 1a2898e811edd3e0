"""Single-writer collection of shortening results into the result table."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..errors import LinkShorteningError
from .models import RoutingError, ShortenResult, ShortLink

logger = logging.getLogger(__name__)


class ResultTable:
    """One link map per issue, indexed by issue position."""

    def __init__(self, num_issues: int, spec_names: Iterable[str]):
        self.spec_names = tuple(spec_names)
        self._slots: list[dict[str, ShortLink]] = [{} for _ in range(num_issues)]

    def __len__(self) -> int:
        return len(self._slots)

    def has(self, issue_index: int, spec_name: str) -> bool:
        return spec_name in self._slots[issue_index]

    def set(self, issue_index: int, spec_name: str, link: ShortLink) -> None:
        self._slots[issue_index][spec_name] = link

    def missing(self) -> list[tuple[int, str]]:
        """Return the (issue index, spec name) pairs with no entry yet."""
        return [
            (index, name)
            for index, slot in enumerate(self._slots)
            for name in self.spec_names
            if name not in slot
        ]

    def freeze(self) -> tuple[Mapping[str, ShortLink], ...]:
        """Return read-only views of the slots, ordered by spec registration."""
        return tuple(
            MappingProxyType(
                {name: slot[name] for name in self.spec_names if name in slot}
            )
            for slot in self._slots
        )


class ResultAggregator:
    """Consumes ShortenResults and is the only writer of the ResultTable."""

    def __init__(
        self, num_issues: int, spec_names: Iterable[str], fail_fast: bool = False
    ):
        """Initialize aggregator.

        Args:
            num_issues: Number of issues, i.e. table slots
            spec_names: Names results may be routed to
            fail_fast: Raise on the first result that is not shortened
        """
        self.table = ResultTable(num_issues, spec_names)
        self.fail_fast = fail_fast
        self.received = 0
        self.failures: list[ShortenResult] = []
        self.routing_errors: list[RoutingError] = []

    def record(self, result: ShortenResult) -> bool:
        """Route one result into its table slot.

        Args:
            result: Result taken off the completion queue

        Returns:
            True if the result was written to the table, False if it was
            reported as a routing error

        Raises:
            LinkShorteningError: In fail-fast mode, for a failed result
        """
        self.received += 1

        reason = None
        message = ""
        if result.spec_name not in self.table.spec_names:
            reason = "unknown_spec"
            message = f"Unrecognized link spec '{result.spec_name}'"
        elif not 0 <= result.issue_index < len(self.table):
            reason = "bad_index"
            message = (
                f"Issue index {result.issue_index} outside table of "
                f"{len(self.table)} issue(s)"
            )
        elif self.table.has(result.issue_index, result.spec_name):
            reason = "duplicate"
            message = (
                f"Second result for {result.spec_name} link of issue index "
                f"{result.issue_index}"
            )

        if reason is not None:
            error = RoutingError(
                issue_index=result.issue_index,
                spec_name=result.spec_name,
                reason=reason,
                message=message,
            )
            logger.warning("Dropping shortening result: %s", message)
            self.routing_errors.append(error)
            return False

        link = ShortLink.from_result(result)
        self.table.set(result.issue_index, result.spec_name, link)
        if not result.ok:
            self.failures.append(result)
            if self.fail_fast:
                raise LinkShorteningError(result)
        return True

    async def collect(
        self,
        queue: "asyncio.Queue[ShortenResult]",
        expected: int,
        deadline: float | None = None,
    ) -> None:
        """Consume results until ``expected`` of them have been received.

        Args:
            queue: Completion queue filled by the dispatcher
            expected: Number of results dispatched
            deadline: Event loop time after which waiting stops

        Raises:
            asyncio.TimeoutError: If the deadline passes first
            LinkShorteningError: In fail-fast mode, for a failed result
        """
        loop = asyncio.get_running_loop()
        while self.received < expected:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                raise asyncio.TimeoutError()
            result = await asyncio.wait_for(queue.get(), remaining)
            self.record(result)
            logger.debug(
                "Collected %d/%d: %s link for issue index %d (%s)",
                self.received,
                expected,
                result.spec_name,
                result.issue_index,
                result.status.value,
            )
