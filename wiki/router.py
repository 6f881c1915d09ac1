"""
Request path validation.

All page requests go through `parse_path` before any storage access. Only
letters and digits can reach the storage, so no `.`, `/` or encoded separator
ever becomes part of a filename.
"""

import logging
import re

from wiki.errors import InvalidPathError
from wiki.types import Route

logger = logging.getLogger(__name__)

ACTIONS = ("view", "edit", "save")
VALID_PATH = re.compile(r"/(edit|save|view)/([a-zA-Z0-9]+)")


def parse_path(path: str) -> Route:
    """
    Split a request path into its action and page identifier.

    Raises InvalidPathError for unknown actions, missing identifiers and
    identifiers with characters other than letters and digits.
    """
    match = VALID_PATH.fullmatch(path or "")
    if match is None:
        logger.debug("Rejected path=%r", path)
        raise InvalidPathError(path)
    return Route(action=match.group(1), identifier=match.group(2))


def page_url(action: str, identifier: str) -> str:
    """
    Build the path for an action on a page.
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown action {action!r}, known actions={ACTIONS}")
    return f"/{action}/{identifier}"
