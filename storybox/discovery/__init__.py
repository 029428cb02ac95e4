"""Story discovery and argument type inference."""

from .args import ParsedArgs, parse_arg_types, parse_args
from .enrich import build_arg_type_index, enrich_server_templates
from .scanner import (
    DiscoveryResult,
    DiscoveryWarning,
    StoryScanner,
    discover_stories,
    parse_stories,
    title_from_name,
)

__all__ = [
    "DiscoveryResult",
    "DiscoveryWarning",
    "ParsedArgs",
    "StoryScanner",
    "build_arg_type_index",
    "discover_stories",
    "enrich_server_templates",
    "parse_arg_types",
    "parse_args",
    "parse_stories",
    "title_from_name",
]
