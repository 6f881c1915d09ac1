import hashlib
import logging
from dataclasses import dataclass

from wiki.errors import NotFoundError
from wiki.ports import PageRenderer, PageRepository
from wiki.router import page_url
from wiki.types import Intent, Page, PageIndex, validate_identifier

logger = logging.getLogger(__name__)


@dataclass
class Rendered:
    """
    A page or index rendered to HTML, ready to be sent back.
    """

    intent: Intent
    body: str

    @property
    def etag(self) -> str:
        content_hash = hashlib.md5(
            self.body.encode("utf-8"), usedforsecurity=False
        ).hexdigest()[:16]
        return f'"{content_hash}"'


@dataclass
class Redirect:
    """
    The caller should be sent to another page.
    """

    location: str


class PageService:
    """Application service for page operations.

    Holds no state between requests, every operation reads or writes the
    repository directly.
    """

    def __init__(self, page_repository: PageRepository, page_renderer: PageRenderer):
        self.page_repository = page_repository
        self.page_renderer = page_renderer

    def view(self, identifier: str) -> Rendered | Redirect:
        """Show a page, or send the caller to create it if it does not exist."""
        try:
            page = self.page_repository.load(identifier)
        except NotFoundError:
            logger.info("Page=%s not found, redirecting to edit", identifier)
            return Redirect(page_url("edit", identifier))
        return Rendered("view", self.page_renderer.render("view", page))

    def edit(self, identifier: str) -> Rendered:
        """Show the editor for a page, empty if the page is new."""
        try:
            page = self.page_repository.load(identifier)
        except NotFoundError:
            logger.debug("New page=%s", identifier)
            page = Page(identifier=identifier)
        return Rendered("edit", self.page_renderer.render("edit", page))

    def save(self, identifier: str, body: str | bytes | None) -> Redirect:
        """Replace the content of a page and send the caller to view it.

        A missing body stores an empty page.
        """
        page = Page(identifier=identifier, content=body or b"")
        self.page_repository.save(page)
        return Redirect(page_url("view", identifier))

    def index(self) -> Rendered:
        """Show the list of all pages."""
        return Rendered("listing", self.page_renderer.render("listing", self.get_index()))

    def get_page(self, identifier: str) -> Page:
        """Get the page data without rendering."""
        return self.page_repository.load(validate_identifier(identifier))

    def get_index(self) -> PageIndex:
        return PageIndex(entries=self.page_repository.list())
