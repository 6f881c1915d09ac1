"""
Types for the wiki.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Literal

from wiki.errors import BadRequestError

IDENTIFIER_RE = re.compile(r"[a-zA-Z0-9]+")

Action = Literal["view", "edit", "save"]
Intent = Literal["view", "edit", "listing"]


def is_valid_identifier(identifier: str) -> bool:
    """
    Check the identifier is non-empty and ASCII alphanumeric only.
    """
    return bool(identifier) and IDENTIFIER_RE.fullmatch(identifier) is not None


def validate_identifier(identifier: str) -> str:
    """
    Return the identifier, or raise BadRequestError if it can not name a page.
    """
    if not identifier:
        raise BadRequestError("Page identifier must not be empty")
    if not is_valid_identifier(identifier):
        raise BadRequestError(
            f"Invalid page identifier {identifier!r}, only letters and digits allowed"
        )
    return identifier


@dataclass
class Page:
    """
    A wiki page, its identifier and raw content.

    The identifier doubles as the stem of the file the page is stored in.
    """

    identifier: str
    content: bytes = b""

    def __post_init__(self):
        validate_identifier(self.identifier)
        if self.content is None:
            self.content = b""
        elif isinstance(self.content, str):
            self.content = self.content.encode("utf-8")

    @property
    def text(self) -> str:
        """
        The content decoded for display.
        """
        return self.content.decode("utf-8", errors="replace")

    def to_dict(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "content": self.text}


@dataclass
class PageIndex:
    """
    The list of page identifiers found in storage.

    Built fresh on each request, never stored.
    """

    entries: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {"count": len(self.entries), "results": list(self.entries)}


@dataclass
class Route:
    """
    A validated request path: the action and the page it applies to.
    """

    action: Action
    identifier: str
