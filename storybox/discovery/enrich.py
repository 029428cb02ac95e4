"""Best-effort argument type annotations for server-rendered components."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from ..logging import get_logger
from ..models import Registry

ENRICH_DIRNAME = ".storybox"
ENRICH_FILENAME = "argtypes.json"

_logger = get_logger("discovery.enrich")


def build_arg_type_index(registry: Registry) -> Dict[str, Dict[str, object]]:
    """Map each server-capable component to its story argument types."""
    index: Dict[str, Dict[str, object]] = {}
    for component in registry:
        if not component.can_ssr:
            continue
        stories: Dict[str, object] = {}
        for story in component.stories:
            stories[story.key] = {
                name: {"type": spec.type.value, "default": spec.default_text}
                for name, spec in story.args.items()
            }
        index[component.name] = {
            "template": component.story_template_path,
            "stories": stories,
        }
    return index


def enrich_server_templates(registry: Registry, components_dir: Path) -> Optional[Path]:
    """Write the argument type index beside the components; failures only log."""
    index = build_arg_type_index(registry)
    if not index:
        _logger.debug("No server-rendered components to enrich")
        return None

    target = Path(components_dir) / ENRICH_DIRNAME / ENRICH_FILENAME
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(index, indent=2, sort_keys=True), encoding="utf-8")
    except OSError as exc:
        _logger.warning("Template enrichment skipped: %s", exc)
        return None

    _logger.info("Wrote argument types for %d components to %s", len(index), target)
    return target


__all__ = ["build_arg_type_index", "enrich_server_templates"]
