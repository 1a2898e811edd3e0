"""Runtime settings for the link annotator."""

from pydantic import BaseModel, Field

from .models import LinkSpec
from .registry import DEFAULT_STASH_PROJECT, DEFAULT_STASH_REPO


class AnnotatorSettings(BaseModel):
    """Validated settings controlling one annotation run."""

    concurrency: int = Field(
        20, ge=1, description="Maximum number of shortening calls in flight"
    )
    request_timeout: float = Field(
        10.0, gt=0, description="Seconds allowed for a single shortening call"
    )
    timeout: float | None = Field(
        60.0,
        gt=0,
        description="Seconds allowed for the whole run, None to wait indefinitely",
    )
    fail_fast: bool = Field(
        False, description="Abort the run on the first pair that fails to shorten"
    )
    key_field: str = Field("key", description="Issue field holding the issue key")
    links_field: str = Field(
        "bitlyLink", description="Issue field the link map is attached to"
    )
    jira_url: str | None = Field(None, description="Jira server root URL")
    stash_url: str | None = Field(None, description="Stash server root URL")
    stash_project: str = Field(DEFAULT_STASH_PROJECT, description="Stash project")
    stash_repo: str = Field(DEFAULT_STASH_REPO, description="Stash repository")
    link_specs: list[LinkSpec] = Field(
        default_factory=list, description="Extra link specs from configuration"
    )
