"""Utility helpers for jira_links."""

from .log_setup import configure_logging, verbosity_to_level

__all__ = ["configure_logging", "verbosity_to_level"]
