"""URLs for the sandbox toolbar and content iframe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from ..models import THEMES, RenderMode
from .query import QueryItems, build_url, with_param, without_params
from .resolver import Resolution, story_path

CONTENT_PREFIX = "/sandbox-content"
BODY_SWAP_PREFIX = "/sandbox-body-swap"
FALLBACK_COMPONENT = "fallback"


@dataclass(frozen=True)
class ModeSwitchLink:
    """One render-mode button in the toolbar."""

    mode: str
    url: str
    active: bool
    text: str


@dataclass(frozen=True)
class ToolbarLinks:
    iframe_src: str
    mode_links: Tuple[ModeSwitchLink, ...]
    toggle_theme_url: str
    reset_args_url: str


def other_theme(theme: str) -> str:
    return THEMES[1] if theme == THEMES[0] else THEMES[0]


def iframe_src(resolution: Resolution) -> str:
    path = story_path(resolution.component.name, resolution.story_key, prefix=CONTENT_PREFIX)
    items: List[Tuple[str, str]] = [
        ("renderMode", resolution.mode.value),
        ("theme", resolution.theme),
    ]
    items.extend(resolution.args.query_items())
    return build_url(path, items)


def mode_switch_links(resolution: Resolution, base_path: str) -> Tuple[ModeSwitchLink, ...]:
    links = []
    for mode in resolution.available_modes:
        active = mode is resolution.mode
        label = mode.value.upper()
        links.append(
            ModeSwitchLink(
                mode=mode.value,
                url=build_url(base_path, with_param(resolution.query, "renderMode", mode.value)),
                active=active,
                text=f"{label} Active" if active else f"Switch to {label}",
            )
        )
    return tuple(links)


def toolbar_links(resolution: Resolution) -> ToolbarLinks:
    """Build every toolbar URL for a resolved story view.

    Toolbar links point at the body-swap endpoint so the client can refresh
    the page body without a full navigation.
    """
    base_path = story_path(resolution.component.name, resolution.story_key, prefix=BODY_SWAP_PREFIX)
    toggle = with_param(resolution.query, "theme", other_theme(resolution.theme))
    declared = resolution.story.args.keys() if resolution.story is not None else ()
    return ToolbarLinks(
        iframe_src=iframe_src(resolution),
        mode_links=mode_switch_links(resolution, base_path),
        toggle_theme_url=build_url(base_path, toggle),
        reset_args_url=build_url(base_path, without_params(resolution.query, declared)),
    )


def home_links(theme: str, query: QueryItems) -> ToolbarLinks:
    base_path = f"{BODY_SWAP_PREFIX}/"
    return ToolbarLinks(
        iframe_src=build_url(
            f"{CONTENT_PREFIX}/{FALLBACK_COMPONENT}",
            [("renderMode", RenderMode.CSR.value), ("theme", theme)],
        ),
        mode_links=(),
        toggle_theme_url=build_url(base_path, with_param(query, "theme", other_theme(theme))),
        reset_args_url=build_url(base_path, query),
    )


__all__ = [
    "BODY_SWAP_PREFIX",
    "CONTENT_PREFIX",
    "FALLBACK_COMPONENT",
    "ModeSwitchLink",
    "ToolbarLinks",
    "home_links",
    "iframe_src",
    "mode_switch_links",
    "other_theme",
    "toolbar_links",
]
