"""Exceptions raised by the link annotation pipeline."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .links.annotator import AnnotationResult
    from .links.models import ShortenResult


class AnnotationError(Exception):
    """Base class for failures that abort a whole annotation run."""


class InvalidIssueDataError(AnnotationError):
    """Raised when the issue payload has no usable issue list or keys."""


class AnnotationMismatchError(AnnotationError):
    """Raised when the result table and the issue list disagree in length."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Result table has {expected} slot(s) but issue data has {actual} issue(s)"
        )
        self.expected = expected
        self.actual = actual


class IncompleteAnnotationError(AnnotationError):
    """Raised when the aggregate deadline passes before every result arrived.

    The partially filled result is kept on ``result`` so callers can still
    use whichever links were shortened in time.
    """

    def __init__(self, received: int, expected: int, result: "AnnotationResult"):
        super().__init__(
            f"Received {received} of {expected} shortening results before the "
            "annotation deadline"
        )
        self.received = received
        self.expected = expected
        self.result = result


class LinkShorteningError(AnnotationError):
    """Raised in fail-fast mode for the first pair that could not be shortened."""

    def __init__(self, result: "ShortenResult"):
        super().__init__(
            f"Failed to shorten {result.spec_name} link for issue index "
            f"{result.issue_index}: {result.error}"
        )
        self.result = result


class ShortenerError(Exception):
    """Raised by a shortener client when the service rejects or drops a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ShortenerTimeoutError(ShortenerError):
    """Raised when a shortening call gives no answer within its timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"No response within {timeout}s")
        self.timeout = timeout
