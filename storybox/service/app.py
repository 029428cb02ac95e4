"""FastAPI application serving the story sandbox."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from .. import __version__
from ..errors import (
    ComponentNotFound,
    InvalidRenderMode,
    SandboxError,
    ServerTemplateUnavailable,
    StoryNotFound,
    TemplateExecutionFailure,
)
from ..logging import get_logger
from ..models import ArgumentSpec, ComponentGroup, RenderMode, StoryVariant
from ..resolution import (
    SelectionView,
    ViewRequest,
    effective_theme,
    first_values,
    home_links,
    passthrough_params,
    story_path,
    toolbar_links,
)
from ..resolution.links import FALLBACK_COMPONENT
from ..resolution.resolver import ContentResolution, Resolution
from ..render import APP_TITLE
from ..sandbox import Sandbox

_ERROR_HEADINGS = {
    ComponentNotFound: "Component not found",
    StoryNotFound: "Story not found",
    InvalidRenderMode: "Invalid render mode",
    ServerTemplateUnavailable: "Server template unavailable",
    TemplateExecutionFailure: "Template execution failed",
}


class HealthResponse(BaseModel):
    status: str
    components: int


class ArgumentModel(BaseModel):
    name: str
    type: str
    default: str
    control: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    options: List[str] = []


class StoryModel(BaseModel):
    key: str
    title: str
    has_csr: bool
    has_ssr: bool
    has_pending_text: bool
    args: List[ArgumentModel]


class ComponentModel(BaseModel):
    name: str
    title: str
    path: str
    can_ssr: bool
    stories: List[StoryModel]


def _argument_model(spec: ArgumentSpec) -> ArgumentModel:
    return ArgumentModel(
        name=spec.name,
        type=spec.type.value,
        default=spec.default_text,
        control=spec.control,
        minimum=spec.minimum,
        maximum=spec.maximum,
        options=list(spec.options),
    )


def _story_model(story: StoryVariant) -> StoryModel:
    return StoryModel(
        key=story.key,
        title=story.title,
        has_csr=story.has_csr,
        has_ssr=story.has_ssr,
        has_pending_text=story.has_pending_text,
        args=[_argument_model(spec) for spec in story.args.values()],
    )


def _component_model(component: ComponentGroup) -> ComponentModel:
    return ComponentModel(
        name=component.name,
        title=component.title,
        path=component.path,
        can_ssr=component.can_ssr,
        stories=[_story_model(story) for story in component.stories],
    )


def create_app(sandbox: Sandbox) -> FastAPI:
    """Create the FastAPI application around an already-built sandbox."""

    app = FastAPI(title="Storybox Sandbox", version=__version__)
    config = sandbox.config
    pages = sandbox.pages
    resolver = sandbox.resolver
    logger = get_logger("service")

    if config.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(config.static_dir)), name="static")
    else:
        logger.warning("Static directory %s does not exist; /static is not served", config.static_dir)

    def _is_programmatic(request: Request) -> bool:
        return request.headers.get(config.programmatic_header, "").lower() == "true"

    def _query(request: Request) -> List[tuple[str, str]]:
        return list(request.query_params.multi_items())

    def _html(content: str, *, title: Optional[str] = None, status_code: int = 200) -> HTMLResponse:
        headers = {config.title_header: title} if title is not None else None
        return HTMLResponse(content, status_code=status_code, headers=headers)

    @app.exception_handler(SandboxError)
    async def sandbox_error_handler(_: Request, exc: SandboxError) -> HTMLResponse:
        status_code = getattr(exc, "status_code", 500)
        detail: Optional[str] = None
        hint: Optional[str] = None
        if isinstance(exc, ServerTemplateUnavailable):
            detail = exc.reason
            hint = (
                f"Define {{% block {exc.story_key} %}} in {exc.component}.stories."
                f"{config.template_extension} or view the story with renderMode=csr."
            )
        elif isinstance(exc, TemplateExecutionFailure):
            detail = str(exc.cause)
        logger.info("Responding %d: %s", status_code, exc)
        page = pages.error_page(
            heading=_ERROR_HEADINGS.get(type(exc), "Sandbox error"),
            message=str(exc),
            detail=detail,
            hint=hint,
        )
        return HTMLResponse(page, status_code=status_code)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", components=len(sandbox.registry))

    @app.get("/api/registry", response_model=List[ComponentModel])
    async def registry() -> List[ComponentModel]:
        return [_component_model(component) for component in sandbox.registry]

    def _home(request: Request, *, partial: bool) -> HTMLResponse:
        query = _query(request)
        theme = effective_theme(first_values(query).get("theme"))
        nav = SelectionView(sandbox.registry).entries()
        content = pages.home(nav, theme=theme, links=home_links(theme, query), partial=partial)
        return _html(content, title=APP_TITLE if partial else None)

    @app.get("/", response_class=HTMLResponse)
    async def home(request: Request) -> HTMLResponse:
        return _home(request, partial=_is_programmatic(request))

    @app.get("/sandbox/", response_class=HTMLResponse)
    async def sandbox_home(request: Request) -> HTMLResponse:
        return _home(request, partial=_is_programmatic(request))

    def _view(request: Request, component: str, story: Optional[str]) -> Response:
        programmatic = _is_programmatic(request)
        view = ViewRequest(
            component=component,
            story_key=story,
            query=tuple(_query(request)),
            programmatic=programmatic,
            path=request.url.path,
        )
        try:
            resolution = resolver.resolve(view)
        except (ComponentNotFound, StoryNotFound) as exc:
            return RedirectResponse(exc.redirect_url, status_code=302)
        if resolution.redirect_url:
            return RedirectResponse(resolution.redirect_url, status_code=302)

        links = toolbar_links(resolution)
        if programmatic:
            content = pages.story_partial(resolution, links, current_path=request.url.path)
            return _html(content, title=resolution.title)
        return _html(pages.story_page(resolution, links, current_path=request.url.path))

    @app.get("/sandbox/{component}", response_class=HTMLResponse)
    async def view_component(request: Request, component: str) -> Response:
        return _view(request, component, None)

    @app.get("/sandbox/{component}/{story}", response_class=HTMLResponse)
    async def view_story(request: Request, component: str, story: str) -> Response:
        return _view(request, component, story)

    @app.get("/sandbox-body-swap/", response_class=HTMLResponse)
    async def body_swap_home(request: Request) -> HTMLResponse:
        return _home(request, partial=True)

    def _body_swap(request: Request, component: str, story: Optional[str]) -> HTMLResponse:
        view = ViewRequest(
            component=component,
            story_key=story,
            query=tuple(_query(request)),
            programmatic=True,
        )
        resolution: Resolution = resolver.resolve(view, substitute_missing_story=True)
        current_path = story_path(resolution.component.name, resolution.story_key)
        content = pages.story_body(resolution, toolbar_links(resolution), current_path=current_path)
        return _html(content, title=resolution.title)

    @app.get("/sandbox-body-swap/{component}", response_class=HTMLResponse)
    async def body_swap_component(request: Request, component: str) -> HTMLResponse:
        return _body_swap(request, component, None)

    @app.get("/sandbox-body-swap/{component}/{story}", response_class=HTMLResponse)
    async def body_swap_story(request: Request, component: str, story: str) -> HTMLResponse:
        return _body_swap(request, component, story)

    def _csr_frame(content: ContentResolution) -> HTMLResponse:
        component = content.component
        frame_config: Dict[str, Any] = {
            "componentName": component.name,
            "storyKey": content.story.key if content.story is not None else None,
            "modulePath": f"{pages.static_url}/{component.path}",
            "theme": content.theme,
            "args": content.args.native(),
        }
        if content.fallback:
            frame_config["params"] = dict(content.args.extra)
        return _html(pages.csr_frame(theme=content.theme, config=frame_config, fallback=content.fallback))

    async def _ssr_frame(content: ContentResolution) -> HTMLResponse:
        assert content.story is not None
        story_key = content.story.key

        def _render() -> str:
            markup = sandbox.templates.render_story(
                content.component.name,
                story_key,
                content.args.native(),
                theme=content.theme,
            )
            return pages.ssr_frame(content.component, markup, theme=content.theme)

        loop = asyncio.get_running_loop()
        return _html(await loop.run_in_executor(None, _render))

    async def _content(request: Request, component: str, story: Optional[str]) -> HTMLResponse:
        query = _query(request)
        if component == FALLBACK_COMPONENT and sandbox.registry.get(component) is None:
            theme = effective_theme(first_values(query).get("theme"))
            frame_config = {"params": dict(passthrough_params(query)), "theme": theme}
            return _html(pages.csr_frame(theme=theme, config=frame_config, fallback=True))

        content = resolver.resolve_content(component, story, query)
        if content.mode is RenderMode.SSR:
            return await _ssr_frame(content)
        return _csr_frame(content)

    @app.get("/sandbox-content/{component}", response_class=HTMLResponse)
    async def content_component(request: Request, component: str) -> HTMLResponse:
        return await _content(request, component, None)

    @app.get("/sandbox-content/{component}/{story}", response_class=HTMLResponse)
    async def content_story(request: Request, component: str, story: str) -> HTMLResponse:
        return await _content(request, component, story)

    return app


def run_service(sandbox: Sandbox, host: str | None = None, port: int | None = None) -> None:  # pragma: no cover - integration path
    app = create_app(sandbox)
    uvicorn.run(
        app,
        host=host or sandbox.config.server.host,
        port=port or sandbox.config.server.port,
        log_level="info",
    )


__all__ = ["ComponentModel", "HealthResponse", "create_app", "run_service"]
