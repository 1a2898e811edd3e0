"""Loading annotator settings from config files and the environment.

Settings are resolved from, highest precedence first:

1. keyword overrides passed to :func:`load_settings`
2. ``JIRA_LINKS_*`` environment variables (a ``.env`` file is honoured)
3. ``.jira.d/config.yml`` files from the working directory up to the root,
   closest first
4. ``/etc/jira-links.yml``
5. the AnnotatorSettings defaults

Only the ``links:`` section of each YAML file is read.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .links.settings import AnnotatorSettings

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".jira.d"
CONFIG_FILE_NAME = "config.yml"
SYSTEM_CONFIG_PATH = Path("/etc/jira-links.yml")
CONFIG_SECTION = "links"
ENV_PREFIX = "JIRA_LINKS_"

# Settings that may be given as environment variables
ENV_FIELDS = (
    "concurrency",
    "request_timeout",
    "timeout",
    "fail_fast",
    "key_field",
    "links_field",
    "jira_url",
    "stash_url",
    "stash_project",
    "stash_repo",
)


def find_config_files(start: Path | None = None) -> list[Path]:
    """Find config files from ``start`` up to the filesystem root.

    Args:
        start: Directory to start from, defaults to the working directory

    Returns:
        Existing config files, closest first, followed by the system file
    """
    start = (start or Path.cwd()).resolve()
    candidates = [
        directory / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        for directory in (start, *start.parents)
    ]
    candidates.append(SYSTEM_CONFIG_PATH)
    return [path for path in candidates if path.is_file()]


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the ``links`` section of one YAML config file.

    Unreadable or malformed files are logged and treated as empty.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Unable to parse %s: %s", path, e)
        return {}

    logger.debug("Found config file: %s", path)
    if not isinstance(data, dict):
        logger.error("Ignoring %s: top level is not a mapping", path)
        return {}

    section = data.get(CONFIG_SECTION) or {}
    if not isinstance(section, dict):
        logger.error("Ignoring %s: '%s' is not a mapping", path, CONFIG_SECTION)
        return {}
    return section


def settings_from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect ``JIRA_LINKS_*`` variables as raw setting values."""
    environ = dict(os.environ) if environ is None else environ
    values: dict[str, Any] = {}
    for name in ENV_FIELDS:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        if name == "timeout" and raw.strip().lower() in ("", "none"):
            values[name] = None
        else:
            values[name] = raw
    return values


def load_settings(
    start: Path | None = None,
    config_files: list[Path] | None = None,
    environ: dict[str, str] | None = None,
    **overrides: Any,
) -> AnnotatorSettings:
    """Resolve AnnotatorSettings through the config cascade.

    No aggregate bound is written ``timeout: null`` in YAML and
    ``JIRA_LINKS_TIMEOUT=none`` (or empty) in the environment. Zero is not
    a synonym for it: every source is validated the same way, and a
    ``timeout`` of 0 is rejected like any other non-positive value.

    Args:
        start: Directory the config file search starts from
        config_files: Explicit config files, closest first; skips the search
        environ: Environment mapping; ``os.environ`` after loading ``.env``
            when None
        **overrides: Setting values that win over every other source. They
            are applied as given: ``timeout=None`` removes the aggregate
            bound and ``stash_url=None`` drops the stash link, so leave out
            the settings that should come from other sources

    Returns:
        Validated AnnotatorSettings

    Raises:
        pydantic.ValidationError: If a resolved value is invalid
    """
    if environ is None:
        load_dotenv()

    files = find_config_files(start) if config_files is None else config_files

    merged: dict[str, Any] = {}
    for path in files:
        for key, value in read_config_file(path).items():
            if key not in merged:
                logger.debug("Setting %r to %r from %s", key, value, path)
                merged[key] = value

    merged.update(settings_from_env(environ))
    merged.update(overrides)
    return AnnotatorSettings.model_validate(merged)
