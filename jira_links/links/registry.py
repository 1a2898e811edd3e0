"""Registry of the named URL templates applied to every issue."""

from collections.abc import Iterable

from .models import ISSUE_PLACEHOLDER, LinkSpec

DEFAULT_STASH_PROJECT = "APPS"
DEFAULT_STASH_REPO = "app"


class LinkSpecRegistry:
    """Ordered, name-unique collection of LinkSpecs."""

    def __init__(self, specs: Iterable[LinkSpec] = ()):
        self._specs: dict[str, LinkSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: LinkSpec) -> LinkSpec:
        """Add a spec to the registry.

        Args:
            spec: LinkSpec to add

        Returns:
            The registered spec

        Raises:
            ValueError: If a spec with the same name is already registered
        """
        if spec.name in self._specs:
            raise ValueError(f"Link spec '{spec.name}' is already registered")
        self._specs[spec.name] = spec
        return spec

    def add(self, name: str, url_template: str) -> LinkSpec:
        return self.register(LinkSpec(name=name, url_template=url_template))

    def specs(self) -> tuple[LinkSpec, ...]:
        """Return the registered specs in registration order."""
        return tuple(self._specs.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self):
        return iter(self.specs())


def jira_browse_spec(jira_url: str) -> LinkSpec:
    """Spec for the issue page on the Jira server."""
    return LinkSpec(
        name="jira", url_template=f"{jira_url.rstrip('/')}/browse/{ISSUE_PLACEHOLDER}"
    )


def stash_branch_spec(
    stash_url: str,
    project: str = DEFAULT_STASH_PROJECT,
    repo: str = DEFAULT_STASH_REPO,
) -> LinkSpec:
    """Spec for the Stash source browser on the branch named after the issue."""
    return LinkSpec(
        name="stash",
        url_template=(
            f"{stash_url.rstrip('/')}/projects/{project}/repos/{repo}"
            f"/browse?at=refs%2Fheads%2F{ISSUE_PLACEHOLDER}"
        ),
    )


def default_registry(
    jira_url: str | None = None,
    stash_url: str | None = None,
    stash_project: str = DEFAULT_STASH_PROJECT,
    stash_repo: str = DEFAULT_STASH_REPO,
    extra: Iterable[LinkSpec] = (),
) -> LinkSpecRegistry:
    """Build the stock jira/stash registry plus any extra specs.

    Args:
        jira_url: Jira server root; the ``jira`` spec is skipped when unset
        stash_url: Stash server root; the ``stash`` spec is skipped when unset
        stash_project: Stash project key holding the repository
        stash_repo: Stash repository slug
        extra: Additional specs registered after the stock ones

    Returns:
        Populated LinkSpecRegistry
    """
    registry = LinkSpecRegistry()
    if jira_url:
        registry.register(jira_browse_spec(jira_url))
    if stash_url:
        registry.register(stash_branch_spec(stash_url, stash_project, stash_repo))
    for spec in extra:
        registry.register(spec)
    return registry
