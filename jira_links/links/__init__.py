"""Concurrent fan-out/fan-in of link shortening over issue batches."""

from .aggregator import ResultAggregator, ResultTable
from .annotator import AnnotationResult, LinkAnnotator, annotate, annotate_sync
from .dispatcher import Dispatcher, build_requests
from .merger import extract_issue_keys, extract_issue_list, merge_annotations
from .models import (
    LinkSpec,
    LinkStatus,
    RoutingError,
    ShortenRequest,
    ShortenResult,
    ShortLink,
)
from .registry import LinkSpecRegistry, default_registry
from .report import print_report
from .settings import AnnotatorSettings
from .worker import shorten_one

__all__ = [
    "AnnotationResult",
    "AnnotatorSettings",
    "Dispatcher",
    "LinkAnnotator",
    "LinkSpec",
    "LinkSpecRegistry",
    "LinkStatus",
    "ResultAggregator",
    "ResultTable",
    "RoutingError",
    "ShortLink",
    "ShortenRequest",
    "ShortenResult",
    "annotate",
    "annotate_sync",
    "build_requests",
    "default_registry",
    "extract_issue_keys",
    "extract_issue_list",
    "merge_annotations",
    "print_report",
    "shorten_one",
]
