"""Pydantic models for the link annotation pipeline.

Requests and results are frozen so that a result handed to the aggregator
through the completion queue cannot be changed by the worker that built it.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

ISSUE_PLACEHOLDER = "${issueName}"

_SCHEME_PATTERN = re.compile(r"^https?://")


class LinkSpec(BaseModel):
    """Named URL template expanded once per issue key."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ..., min_length=1, description="Routing key, e.g. 'jira' or 'stash'"
    )
    url_template: str = Field(
        ..., description=f"Long URL template containing {ISSUE_PLACEHOLDER}"
    )

    @field_validator("url_template")
    @classmethod
    def _require_placeholder(cls, value: str) -> str:
        if ISSUE_PLACEHOLDER not in value:
            raise ValueError(
                f"url_template must contain the {ISSUE_PLACEHOLDER} placeholder"
            )
        return value

    def expand(self, issue_key: str) -> str:
        """Substitute the issue key into every placeholder of the template."""
        return self.url_template.replace(ISSUE_PLACEHOLDER, issue_key)


class LinkStatus(str, Enum):
    """Outcome of shortening one (issue, spec) pair."""

    SHORTENED = "shortened"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class ShortenRequest(BaseModel):
    """One unit of work: shorten ``long_url`` for issue ``issue_index``."""

    model_config = ConfigDict(frozen=True)

    issue_index: int = Field(..., ge=0, description="Position of the issue")
    spec_name: str = Field(..., description="Name of the LinkSpec that built it")
    long_url: str = Field(..., description="Fully substituted URL to shorten")


class ShortenResult(BaseModel):
    """Outcome of exactly one ShortenRequest, successful or not."""

    model_config = ConfigDict(frozen=True)

    issue_index: int
    spec_name: str
    long_url: str
    short_url: str | None = None
    status: LinkStatus
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LinkStatus.SHORTENED

    @classmethod
    def success(cls, request: ShortenRequest, short_url: str) -> "ShortenResult":
        return cls(
            issue_index=request.issue_index,
            spec_name=request.spec_name,
            long_url=request.long_url,
            short_url=short_url,
            status=LinkStatus.SHORTENED,
        )

    @classmethod
    def failure(
        cls,
        request: ShortenRequest,
        error: BaseException | str,
        status: LinkStatus = LinkStatus.FAILED,
    ) -> "ShortenResult":
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            error_type = type(error).__name__
        else:
            message, error_type = error, None
        return cls(
            issue_index=request.issue_index,
            spec_name=request.spec_name,
            long_url=request.long_url,
            status=status,
            error=message,
            error_type=error_type,
        )


class ShortLink(BaseModel):
    """Link entry attached to an issue under its spec name."""

    model_config = ConfigDict(frozen=True)

    url: str | None = Field(None, description="Short URL, None when not shortened")
    long_url: str = Field(..., description="Long URL that was submitted")
    status: LinkStatus = Field(..., description="Outcome of the shortening call")
    error: str | None = Field(None, description="Failure message, if any")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_url(self) -> str | None:
        """Short URL without its scheme, as shown in issue listings."""
        if self.url is None:
            return None
        return _SCHEME_PATTERN.sub("", self.url)

    @classmethod
    def from_result(cls, result: ShortenResult) -> "ShortLink":
        return cls(
            url=result.short_url,
            long_url=result.long_url,
            status=result.status,
            error=result.error,
        )


class RoutingError(BaseModel):
    """A result the aggregator could not route into the result table."""

    model_config = ConfigDict(frozen=True)

    issue_index: int
    spec_name: str
    reason: str = Field(..., description="unknown_spec, bad_index or duplicate")
    message: str
