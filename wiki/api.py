import logging
import random
from typing import Annotated

import fastapi
import fastapi.responses
from pydantic import BaseModel, Field

from wiki import __version__
from wiki.adapters import FileSystemPageRepository, Jinja2PageRenderer
from wiki.config import Config
from wiki.errors import WikiError
from wiki.router import parse_path
from wiki.services import PageService, Redirect, Rendered
from wiki.setup import trace_id_var
from wiki.types import Route

logger = logging.getLogger(__name__)


class PageResponse(BaseModel):
    identifier: str
    content: str


class PageListResponse(BaseModel):
    count: int
    results: list[str] = Field(description="Identifiers of all stored pages")


def page_route(request: fastapi.Request) -> Route:
    """
    Validate the request path, before the handler touches any page.
    """
    return parse_path(request.url.path)


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """
    Check an If-None-Match header against the current ETag.

    The header may list several tags, use weak `W/` tags or be `*`.
    """
    if not if_none_match:
        return False
    for tag in if_none_match.split(","):
        tag = tag.strip()
        if tag == "*":
            return True
        if tag.startswith("W/"):
            tag = tag[2:]
        if tag == etag:
            return True
    return False


def to_response(
    outcome: Rendered | Redirect, request: fastapi.Request | None = None
) -> fastapi.responses.Response:
    if isinstance(outcome, Redirect):
        return fastapi.responses.RedirectResponse(url=outcome.location, status_code=302)

    headers = {}
    if outcome.intent == "view":
        etag = outcome.etag
        if request is not None and etag_matches(
            request.headers.get("If-None-Match"), etag
        ):
            return fastapi.responses.Response(status_code=304, headers={"ETag": etag})
        headers["ETag"] = etag
    return fastapi.responses.HTMLResponse(content=outcome.body, headers=headers)


def create_app(page_service: PageService, *, debug: bool = False) -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    app = fastapi.FastAPI(
        title="flatwiki",
        description="A wiki storing each page as a text file",
        version=__version__,
    )

    @app.middleware("http")
    async def set_trace_id(request: fastapi.Request, call_next):
        def new_trace_id():
            return f"{random.getrandbits(64):016x}"

        trace_id = request.headers.get("x-trace-id") or new_trace_id()
        request.state.trace_id = trace_id
        token = trace_id_var.set(trace_id)
        try:
            response = await call_next(request)
            response.headers["x-trace-id"] = trace_id
            remote = request.client.host if request.client else "-"
            logger.info(
                "%s %s %s %d", remote, request.method, request.url, response.status_code
            )
            return response
        finally:
            trace_id_var.reset(token)

    @app.exception_handler(WikiError)
    async def wiki_error_handler(request: fastapi.Request, exc: WikiError):
        if exc.status_code >= 500:
            logger.error(
                "Request %s %s failed: %s", request.method, request.url.path, exc,
                exc_info=exc,
            )
            content = exc.message if debug else "Internal Server Error"
        else:
            logger.debug("Request %s %s: %s", request.method, request.url.path, exc)
            content = exc.message
        return fastapi.responses.PlainTextResponse(content, status_code=exc.status_code)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/")
    def redirect_to_index():
        return fastapi.responses.RedirectResponse(url="/index", status_code=302)

    @app.get("/index", response_class=fastapi.responses.HTMLResponse)
    def index_page():
        """List all pages."""
        return to_response(page_service.index())

    @app.get("/api/pages", response_model=PageListResponse)
    def list_pages():
        index = page_service.get_index()
        return PageListResponse(**index.to_dict())

    @app.get("/api/pages/{identifier}", response_model=PageResponse)
    def get_page_data(identifier: str):
        """Get page data as JSON (for API access)."""
        page = page_service.get_page(identifier)
        return PageResponse(**page.to_dict())

    @app.api_route("/view/{identifier}", methods=["GET", "POST"])
    def view_page(
        request: fastapi.Request, route: Annotated[Route, fastapi.Depends(page_route)]
    ):
        """Show a page, redirecting to the editor when it does not exist yet."""
        return to_response(page_service.view(route.identifier), request)

    @app.api_route("/edit/{identifier}", methods=["GET", "POST"])
    def edit_page(route: Annotated[Route, fastapi.Depends(page_route)]):
        return to_response(page_service.edit(route.identifier))

    @app.post("/save/{identifier}")
    def save_page(
        route: Annotated[Route, fastapi.Depends(page_route)],
        body: Annotated[str | None, fastapi.Form()] = None,
    ):
        """Store the submitted `body` form field as the page content."""
        return to_response(page_service.save(route.identifier, body))

    @app.api_route("/{path:path}", methods=["GET", "POST"])
    def unknown_path(request: fastapi.Request):
        route = parse_path(request.url.path)
        # a valid page path only lands here with the wrong method
        raise fastapi.HTTPException(
            status_code=405, detail=f"Method not allowed for {route.action}"
        )

    return app


def create_page_service(config: Config) -> PageService:
    """Create a page service with file system storage."""
    page_repository = FileSystemPageRepository(
        config.storage.path,
        suffix=config.storage.suffix,
        mode=config.storage.mode,
        sort=config.storage.sort,
    )
    page_renderer = Jinja2PageRenderer(
        config.renderer.templates, use_markdown=config.renderer.markdown
    )
    return PageService(page_repository, page_renderer)


def create_app_from_config(config: Config) -> fastapi.FastAPI:
    return create_app(create_page_service(config), debug=config.debug)
