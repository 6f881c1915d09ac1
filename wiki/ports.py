from abc import ABC, abstractmethod

from wiki.types import Intent, Page, PageIndex


class PageRepository(ABC):
    """Port for page storage operations."""

    @abstractmethod
    def load(self, identifier: str) -> Page:
        """Load a page, raising NotFoundError if it does not exist."""
        pass

    @abstractmethod
    def save(self, page: Page) -> None:
        """Store a page, replacing any previous content."""
        pass

    @abstractmethod
    def list(self) -> list[str]:
        """List the identifiers of all stored pages."""
        pass


class PageRenderer(ABC):
    """Port for page rendering operations."""

    @abstractmethod
    def render(self, intent: Intent, data: Page | PageIndex) -> str:
        """Render a page or the page index to HTML."""
        pass
