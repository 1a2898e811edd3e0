"""Concurrent short-link annotation for Jira issue search results."""

from .config import load_settings
from .errors import (
    AnnotationError,
    AnnotationMismatchError,
    IncompleteAnnotationError,
    InvalidIssueDataError,
    LinkShorteningError,
    ShortenerError,
    ShortenerTimeoutError,
)
from .links import (
    AnnotationResult,
    AnnotatorSettings,
    LinkAnnotator,
    LinkSpec,
    LinkSpecRegistry,
    annotate,
    annotate_sync,
    default_registry,
)
from .utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    "AnnotationError",
    "AnnotationMismatchError",
    "AnnotationResult",
    "AnnotatorSettings",
    "IncompleteAnnotationError",
    "InvalidIssueDataError",
    "LinkAnnotator",
    "LinkShorteningError",
    "LinkSpec",
    "LinkSpecRegistry",
    "ShortenerError",
    "ShortenerTimeoutError",
    "annotate",
    "annotate_sync",
    "configure_logging",
    "default_registry",
    "load_settings",
]
