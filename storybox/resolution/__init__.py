"""Render-mode resolution and argument merging."""

from .links import ModeSwitchLink, ToolbarLinks, home_links, toolbar_links
from .merge import MergedArgs, coerce, merge_args, passthrough_params
from .query import build_url, first_values, with_param, without_params
from .resolver import (
    ContentResolution,
    Resolution,
    Resolver,
    SelectionView,
    ViewRequest,
    effective_theme,
    story_path,
)

__all__ = [
    "ContentResolution",
    "MergedArgs",
    "ModeSwitchLink",
    "Resolution",
    "Resolver",
    "SelectionView",
    "ToolbarLinks",
    "ViewRequest",
    "build_url",
    "coerce",
    "effective_theme",
    "first_values",
    "home_links",
    "merge_args",
    "passthrough_params",
    "story_path",
    "toolbar_links",
    "with_param",
    "without_params",
]
