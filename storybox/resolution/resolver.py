"""Per-request resolution of component, story, render mode, theme and args."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from ..errors import ComponentNotFound, InvalidRenderMode, ServerTemplateUnavailable, StoryNotFound
from ..logging import get_logger
from ..models import THEMES, ComponentGroup, Registry, RenderMode, StoryVariant
from .merge import MergedArgs, merge_args, passthrough_params
from .query import QueryItems, build_url, first_values, with_param

DEFAULT_THEME = THEMES[0]
VIEW_PREFIX = "/sandbox"


class StoryTemplateLookup(Protocol):
    """Anything that can tell whether a story has a loaded server template."""

    def has_story(self, component: str, story_key: str) -> bool:
        ...


@dataclass(frozen=True)
class ViewRequest:
    """The parts of an HTTP request the resolver looks at."""

    component: str
    story_key: Optional[str] = None
    query: Tuple[Tuple[str, str], ...] = ()
    programmatic: bool = False
    path: str = ""


@dataclass(frozen=True)
class NavStory:
    story: StoryVariant
    selected: bool


@dataclass(frozen=True)
class NavComponent:
    component: ComponentGroup
    selected: bool
    stories: Tuple[NavStory, ...]


@dataclass(frozen=True)
class SelectionView:
    """Request-scoped selection over the shared registry.

    Holds indices into the registry; the registry itself is never modified.
    """

    registry: Registry
    component_index: Optional[int] = None
    story_index: Optional[int] = None

    @property
    def component(self) -> Optional[ComponentGroup]:
        if self.component_index is None:
            return None
        return self.registry.components[self.component_index]

    @property
    def story(self) -> Optional[StoryVariant]:
        component = self.component
        if component is None or self.story_index is None:
            return None
        return component.stories[self.story_index]

    def is_selected(self, component_index: int, story_index: Optional[int] = None) -> bool:
        if component_index != self.component_index:
            return False
        return story_index is None or story_index == self.story_index

    def entries(self) -> List[NavComponent]:
        """Navigation entries with selection flags for this request."""
        entries: List[NavComponent] = []
        for ci, component in enumerate(self.registry.components):
            stories = tuple(
                NavStory(story=story, selected=self.is_selected(ci, si))
                for si, story in enumerate(component.stories)
            )
            entries.append(
                NavComponent(component=component, selected=self.is_selected(ci), stories=stories)
            )
        return entries


@dataclass
class Resolution:
    """Outcome of resolving a story view request."""

    selection: SelectionView
    mode: RenderMode
    theme: str
    available_modes: List[RenderMode]
    args: MergedArgs
    programmatic: bool = False
    fallback: bool = False
    requested_mode: Optional[str] = None
    requested_theme: Optional[str] = None
    redirect_url: Optional[str] = None
    query: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def component(self) -> ComponentGroup:
        component = self.selection.component
        assert component is not None
        return component

    @property
    def story(self) -> Optional[StoryVariant]:
        return self.selection.story

    @property
    def story_key(self) -> str:
        story = self.story
        return story.key if story is not None else ""

    @property
    def ssr_available(self) -> bool:
        return RenderMode.SSR in self.available_modes

    @property
    def title(self) -> str:
        if self.story is not None:
            return f"{self.component.title} - {self.story.title}"
        return f"{self.component.title} - Info"


@dataclass
class ContentResolution:
    """Outcome of resolving an iframe content request."""

    component: ComponentGroup
    story: Optional[StoryVariant]
    mode: RenderMode
    theme: str
    args: MergedArgs

    @property
    def fallback(self) -> bool:
        return self.story is None


def effective_theme(requested: Optional[str]) -> str:
    return requested if requested in THEMES else DEFAULT_THEME


def story_path(component: str, story_key: Optional[str] = None, prefix: str = VIEW_PREFIX) -> str:
    path = f"{prefix}/{component}"
    if story_key:
        path += f"/{story_key}"
    return path


class Resolver:
    """Decides what a request shows, and how, from the read-only registry."""

    def __init__(self, registry: Registry, templates: StoryTemplateLookup) -> None:
        self.registry = registry
        self.templates = templates
        self.logger = get_logger("resolver")

    def available_modes(self, component: ComponentGroup, story: Optional[StoryVariant]) -> List[RenderMode]:
        """Render modes usable for ``story`` in this request."""
        if story is None:
            return [RenderMode.CSR]
        modes: List[RenderMode] = []
        if story.has_csr:
            modes.append(RenderMode.CSR)
        if story.has_ssr and component.can_ssr:
            if self.templates.has_story(component.name, story.key):
                modes.append(RenderMode.SSR)
            else:
                self.logger.warning(
                    "Story %s/%s is marked for server rendering but has no template block %r",
                    component.name,
                    story.key,
                    story.key,
                )
        return modes

    def resolve(self, request: ViewRequest, *, substitute_missing_story: bool = False) -> Resolution:
        """Resolve a story view.

        Raises :class:`ComponentNotFound` for unknown components and
        :class:`StoryNotFound` for unknown story keys, unless
        ``substitute_missing_story`` selects the first story instead.
        A canonical redirect, when needed, is returned in ``redirect_url``.
        """
        component_index = self.registry.index_of(request.component)
        if component_index is None:
            self.logger.info("Component not found: %s", request.component)
            raise ComponentNotFound(request.component, redirect_url="/")
        component = self.registry.components[component_index]

        story_index: Optional[int] = None
        fallback = False
        if not request.story_key:
            if component.stories:
                story_index = 0
            else:
                fallback = True
        else:
            story_index = component.story_index(request.story_key)
            if story_index is None:
                if not component.stories:
                    fallback = True
                elif substitute_missing_story:
                    self.logger.info(
                        "Story %r not found in %s; using %s",
                        request.story_key,
                        component.name,
                        component.stories[0].key,
                    )
                    story_index = 0
                else:
                    first_key = component.stories[0].key
                    redirect_url = build_url(story_path(component.name, first_key), request.query)
                    self.logger.info("Story %r not found in %s", request.story_key, component.name)
                    raise StoryNotFound(component.name, request.story_key, redirect_url)

        selection = SelectionView(self.registry, component_index, story_index)
        story = selection.story
        available = self.available_modes(component, story)

        params = first_values(request.query)
        requested_mode = params.get("renderMode")
        requested_theme = params.get("theme")
        requested_valid = requested_mode in {mode.value for mode in available}

        if requested_valid:
            mode = RenderMode(requested_mode)
        elif not request.programmatic:
            mode = RenderMode.SSR
        elif RenderMode.CSR in available:
            mode = RenderMode.CSR
        elif RenderMode.SSR in available:
            mode = RenderMode.SSR
        elif available:
            mode = available[0]
        else:
            mode = RenderMode.CSR

        if fallback:
            mode = RenderMode.CSR

        theme = effective_theme(requested_theme)

        if story is not None:
            args = merge_args(story.args, params)
        else:
            args = MergedArgs(extra=passthrough_params(request.query))

        resolution = Resolution(
            selection=selection,
            mode=mode,
            theme=theme,
            available_modes=available,
            args=args,
            programmatic=request.programmatic,
            fallback=fallback,
            requested_mode=requested_mode,
            requested_theme=requested_theme,
            query=tuple(request.query),
        )

        if not request.programmatic:
            resolution.redirect_url = self._canonical_url(request, resolution, requested_valid)

        self.logger.debug(
            "Resolved %s/%s: programmatic=%s mode=%s theme=%s available=%s redirect=%s",
            component.name,
            resolution.story_key,
            request.programmatic,
            mode.value,
            theme,
            [item.value for item in available],
            resolution.redirect_url,
        )
        return resolution

    def _canonical_url(self, request: ViewRequest, resolution: Resolution, requested_valid: bool) -> Optional[str]:
        mode = resolution.mode.value
        needs_redirect = False
        if not requested_valid and resolution.requested_mode != mode:
            needs_redirect = True
        requested_theme = resolution.requested_theme
        if requested_theme != resolution.theme and not (
            not requested_theme and resolution.theme == DEFAULT_THEME
        ):
            needs_redirect = True
        if not needs_redirect:
            return None

        items = with_param(request.query, "renderMode", mode)
        items = with_param(items, "theme", resolution.theme)
        path = request.path or story_path(resolution.component.name, request.story_key)
        url = build_url(path, items)
        self.logger.info("Redirecting to canonical URL %s", url)
        return url

    def resolve_content(
        self,
        component_name: str,
        story_key: Optional[str],
        query: QueryItems,
    ) -> ContentResolution:
        """Resolve an iframe content request for an explicit render mode."""
        params = first_values(query)
        requested_mode = params.get("renderMode")
        if requested_mode not in {mode.value for mode in RenderMode}:
            raise InvalidRenderMode(requested_mode)
        mode = RenderMode(requested_mode)
        theme = effective_theme(params.get("theme"))

        component = self.registry.get(component_name)
        if component is None:
            raise ComponentNotFound(component_name, redirect_url="/")

        story = component.story(story_key) if story_key else None

        if mode is RenderMode.SSR:
            if story is None:
                raise StoryNotFound(
                    component.name,
                    story_key or "",
                    redirect_url=story_path(component.name),
                )
            if not (story.has_ssr and component.can_ssr):
                raise ServerTemplateUnavailable(
                    component.name, story.key, "story is not marked for server rendering"
                )
            if not self.templates.has_story(component.name, story.key):
                raise ServerTemplateUnavailable(
                    component.name, story.key, f"template block {story.key!r} not found"
                )

        if story is not None:
            args = merge_args(story.args, params)
        else:
            args = MergedArgs(extra=passthrough_params(query))
        return ContentResolution(component=component, story=story, mode=mode, theme=theme, args=args)


__all__ = [
    "ContentResolution",
    "DEFAULT_THEME",
    "NavComponent",
    "NavStory",
    "Resolution",
    "Resolver",
    "SelectionView",
    "StoryTemplateLookup",
    "ViewRequest",
    "effective_theme",
    "story_path",
]
