"""Reading issue keys out of issue payloads and writing link maps back."""

import copy
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

from ..errors import AnnotationMismatchError, InvalidIssueDataError
from .models import ShortLink

ISSUES_FIELD = "issues"


def extract_issue_list(data: Any) -> list[MutableMapping[str, Any]]:
    """Return the issue records of a payload.

    Args:
        data: Jira search response (``{"issues": [...]}``) or a list of issues

    Returns:
        The issue records, in order

    Raises:
        InvalidIssueDataError: If no issue list can be found
    """
    if isinstance(data, Mapping):
        if ISSUES_FIELD not in data:
            raise InvalidIssueDataError(
                f"Issue payload has no '{ISSUES_FIELD}' field"
            )
        issues = data[ISSUES_FIELD]
    else:
        issues = data

    if isinstance(issues, (str, bytes)) or not isinstance(issues, Sequence):
        raise InvalidIssueDataError(
            f"Expected a list of issues, got {type(issues).__name__}"
        )

    for position, issue in enumerate(issues):
        if not isinstance(issue, MutableMapping):
            raise InvalidIssueDataError(
                f"Issue at position {position} is {type(issue).__name__}, "
                "expected a mapping"
            )
    return list(issues)


def extract_issue_keys(
    issues: Sequence[Mapping[str, Any]], key_field: str = "key"
) -> list[str]:
    """Return the issue keys in issue order."""
    keys = []
    for position, issue in enumerate(issues):
        key = issue.get(key_field)
        if not isinstance(key, str) or not key:
            raise InvalidIssueDataError(
                f"Issue at position {position} has no string '{key_field}' field"
            )
        keys.append(key)
    return keys


def merge_annotations(
    data: Any,
    table: Sequence[Mapping[str, ShortLink]],
    links_field: str = "bitlyLink",
) -> Any:
    """Attach each table slot to the issue at the same position.

    The caller's payload is left untouched; a deep copy carrying the links
    is returned.

    Args:
        data: Issue payload the table was built from
        table: One link map per issue
        links_field: Issue field the link map is stored under

    Returns:
        Annotated copy of ``data``

    Raises:
        AnnotationMismatchError: If the table and issue list lengths differ
    """
    annotated = copy.deepcopy(data)
    issues = extract_issue_list(annotated)
    if len(issues) != len(table):
        raise AnnotationMismatchError(len(table), len(issues))

    for issue, links in zip(issues, table):
        issue[links_field] = {
            name: link.model_dump(mode="json") for name, link in links.items()
        }
    return annotated
