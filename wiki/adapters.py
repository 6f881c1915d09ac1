import contextlib
import logging
import os
import tempfile
from pathlib import Path

import jinja2
import markdown
from markupsafe import Markup

from wiki.errors import NotFoundError, RenderError, StorageError
from wiki.ports import PageRenderer, PageRepository
from wiki.types import Intent, Page, PageIndex, is_valid_identifier

logger = logging.getLogger(__name__)

TEMPLATES = {
    "view": "view.html",
    "edit": "edit.html",
    "listing": "index.html",
}


class FileSystemPageRepository(PageRepository):
    """File system implementation of PageRepository.

    Each page is a file named `<identifier><suffix>` directly under the base
    directory.
    """

    def __init__(
        self,
        base_directory: str | Path,
        *,
        suffix: str = ".txt",
        mode: int = 0o600,
        sort: bool = True,
    ):
        self.base_path = Path(base_directory)
        self.suffix = suffix
        self.mode = mode
        self.sort = sort
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Can not create storage at path={self.base_path}: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.base_path} suffix={self.suffix}>"

    def page_path(self, identifier: str) -> Path:
        return self.base_path / f"{identifier}{self.suffix}"

    def load(self, identifier: str) -> Page:
        """Read a page from the file system."""
        path = self.page_path(identifier)
        try:
            content = path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(identifier) from e
        except OSError as e:
            logger.error("Failed to read page=%s path=%s: %s", identifier, path, e)
            raise StorageError(f"Can not read page {identifier!r}: {e}") from e
        logger.debug("Loaded page=%s size=%d", identifier, len(content))
        return Page(identifier=identifier, content=content)

    def save(self, page: Page) -> None:
        """Write a page to the file system.

        The content goes to a temporary file in the same directory which then
        replaces the page file, so a failed write never leaves a truncated page.
        """
        path = self.page_path(page.identifier)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.base_path, prefix=f".{page.identifier}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as file:
                file.write(page.content)
                file.flush()
                os.fsync(file.fileno())
            os.chmod(tmp_path, self.mode)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write page=%s path=%s: %s", page.identifier, path, e)
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise StorageError(f"Can not write page {page.identifier!r}: {e}") from e
        logger.info("Saved page=%s size=%d", page.identifier, len(page.content))

    def list(self) -> list[str]:
        """List all pages in the base directory."""
        pages = []
        try:
            for item in self.base_path.iterdir():
                if not item.name.endswith(self.suffix) or not item.is_file():
                    continue
                identifier = item.name[: -len(self.suffix)]
                if not is_valid_identifier(identifier):
                    logger.debug("Skipping file=%s, not a page identifier", item.name)
                    continue
                pages.append(identifier)
        except OSError as e:
            logger.error("Failed to list pages at path=%s: %s", self.base_path, e)
            raise StorageError(f"Can not list pages: {e}") from e

        if self.sort:
            return sorted(pages)
        return pages


def markdown_filter(text):
    """Convert markdown text to HTML"""
    if not text:
        return ""
    html = markdown.markdown(
        text,
        extensions=[
            "markdown.extensions.fenced_code",
            "markdown.extensions.tables",
        ],
    )
    return Markup(html)


class Jinja2PageRenderer(PageRenderer):
    """Jinja2 implementation of PageRenderer.

    Uses the bundled templates unless a template directory is given. Page
    bodies are escaped, or converted with markdown when `use_markdown` is set.
    """

    def __init__(
        self, templates_directory: str | Path | None = None, *, use_markdown: bool = False
    ):
        if templates_directory:
            loader = jinja2.FileSystemLoader(Path(templates_directory))
        else:
            loader = jinja2.FileSystemLoader(Path(__file__).parent / "templates")
        self.jinja2_env = jinja2.Environment(
            loader=loader,
            autoescape=jinja2.select_autoescape(["html"]),
        )
        self.jinja2_env.filters["markdown"] = markdown_filter
        self.use_markdown = use_markdown

    def render(self, intent: Intent, data: Page | PageIndex) -> str:
        template_name = TEMPLATES.get(intent)
        if template_name is None:
            raise RenderError(f"Unknown render intent {intent!r}")

        if isinstance(data, PageIndex):
            context = {"index": data, "pages": data.entries}
        else:
            context = {"page": data, "title": data.identifier, "body": data.text}

        try:
            template = self.jinja2_env.get_template(template_name)
            return template.render(markdown=self.use_markdown, **context)
        except jinja2.TemplateError as e:
            logger.error("Failed to render template=%s intent=%s: %s", template_name, intent, e)
            raise RenderError(f"Can not render {intent}: {e}") from e
