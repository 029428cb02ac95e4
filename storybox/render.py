"""HTML rendering for the sandbox shell, content frames and error pages."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .models import ArgumentType, ComponentGroup
from .resolution.links import ToolbarLinks
from .resolution.resolver import NavComponent, Resolution

APP_TITLE = "Component Playground"
IFRAME_CLIENT_SCRIPT = "modules/sandbox/iframe-client.js"
FALLBACK_SCRIPT = "modules/sandbox/sandbox-fallback.js"

_INPUT_TYPES = {
    ArgumentType.STRING: "text",
    ArgumentType.BOOLEAN: "checkbox",
    ArgumentType.NUMBER: "number",
    ArgumentType.MARKUP: "textarea",
}


class PageRenderer:
    """Renders the sandbox pages from the bundled Jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None, *, static_url: str = "/static") -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("page_templates")
        self.static_url = static_url.rstrip("/")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.globals["static_url"] = self.static_url
        self._env.globals["input_types"] = {arg_type.value: kind for arg_type, kind in _INPUT_TYPES.items()}

    def _render(self, name: str, **context: Any) -> str:
        return self._env.get_template(name).render(**context)

    def home(self, nav: List[NavComponent], *, theme: str, links: ToolbarLinks, partial: bool = False) -> str:
        context = {
            "title": APP_TITLE,
            "nav": nav,
            "theme": theme,
            "links": links,
            "resolution": None,
            "current_path": "/",
        }
        return self._render("body.html" if partial else "page.html", **context)

    def story_page(self, resolution: Resolution, links: ToolbarLinks, *, current_path: str) -> str:
        return self._render("page.html", **self._story_context(resolution, links, current_path))

    def story_body(self, resolution: Resolution, links: ToolbarLinks, *, current_path: str) -> str:
        return self._render("body.html", **self._story_context(resolution, links, current_path))

    def story_partial(self, resolution: Resolution, links: ToolbarLinks, *, current_path: str) -> str:
        """Fragments for an in-page navigation, each tagged with the selector it replaces."""
        return self._render("partial.html", **self._story_context(resolution, links, current_path))

    def _story_context(self, resolution: Resolution, links: ToolbarLinks, current_path: str) -> Dict[str, Any]:
        return {
            "title": resolution.title,
            "nav": resolution.selection.entries(),
            "theme": resolution.theme,
            "links": links,
            "resolution": resolution,
            "current_path": current_path,
        }

    def csr_frame(self, *, theme: str, config: Mapping[str, Any], fallback: bool) -> str:
        script = FALLBACK_SCRIPT if fallback else IFRAME_CLIENT_SCRIPT
        return self._render(
            "frame_csr.html",
            theme=theme,
            config=dict(config),
            script_url=f"{self.static_url}/{script}",
            fallback=fallback,
        )

    def ssr_frame(self, component: ComponentGroup, content: Markup, *, theme: str) -> str:
        return self._render(
            "frame_ssr.html",
            theme=theme,
            content=content,
            css_url=self.component_css_url(component),
        )

    def component_css_url(self, component: ComponentGroup) -> str:
        folder = PurePosixPath(component.path).parent
        return f"{self.static_url}/{folder.as_posix()}/{component.name}.css".replace("/./", "/")

    def error_page(self, *, heading: str, message: str, detail: Optional[str] = None, hint: Optional[str] = None) -> str:
        return self._render("error.html", heading=heading, message=message, detail=detail, hint=hint)


__all__ = ["APP_TITLE", "PageRenderer"]
