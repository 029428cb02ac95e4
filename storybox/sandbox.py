"""Assemble the read-only sandbox state once, before serving."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import SandboxConfig
from .discovery import DiscoveryWarning, StoryScanner, enrich_server_templates
from .logging import get_logger
from .models import Registry
from .render import PageRenderer
from .resolution import Resolver
from .templates import StoryTemplates


@dataclass
class Sandbox:
    """Everything a request handler reads. Nothing here is mutated after startup."""

    config: SandboxConfig
    registry: Registry
    templates: StoryTemplates
    resolver: Resolver
    pages: PageRenderer
    base_dir: Path
    warnings: List[DiscoveryWarning] = field(default_factory=list)


def build_sandbox(config: SandboxConfig) -> Sandbox:
    """Discover stories and load server templates for ``config``.

    Raises :class:`~storybox.errors.DirectoryWalkFailure` when the components
    directory cannot be walked.
    """
    logger = get_logger("sandbox")
    scanner = StoryScanner(config.story_extensions, config.template_extension)
    result = scanner.scan(config.components_dir, config.static_dir)

    templates = StoryTemplates.load(result.registry, result.base_dir, strict=config.strict_templates)
    if config.enrich_templates:
        enrich_server_templates(result.registry, config.components_dir)

    logger.info(
        "Sandbox ready: %d components, %d warnings",
        len(result.registry),
        len(result.warnings),
    )
    return Sandbox(
        config=config,
        registry=result.registry,
        templates=templates,
        resolver=Resolver(result.registry, templates),
        pages=PageRenderer(),
        base_dir=result.base_dir,
        warnings=list(result.warnings),
    )


__all__ = ["Sandbox", "build_sandbox"]
