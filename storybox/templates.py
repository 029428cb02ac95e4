"""Server-side story templates backed by Jinja2.

Each server-capable component has two files beside its story source:
``<name>.<ext>``, a macro library, and ``<name>.stories.<ext>``, which
defines one ``{% block <StoryKey> %}`` per story. A story block renders with
the merged story args, ``theme`` and ``component`` (the macro library) in
its context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError
from markupsafe import Markup

from .errors import ServerTemplateUnavailable, TemplateExecutionFailure
from .logging import get_logger
from .models import ComponentGroup, Registry


class StoryTemplates:
    """Story templates loaded once at startup and shared read-only across requests."""

    def __init__(self, base_dir: Path | str, *, strict: bool = False) -> None:
        self.base_dir = Path(base_dir)
        options: Dict[str, Any] = {"autoescape": True}
        if strict:
            options["undefined"] = StrictUndefined
        self._env = Environment(loader=FileSystemLoader(str(self.base_dir)), **options)
        self._templates: Dict[str, Template] = {}
        self._libraries: Dict[str, Any] = {}
        self.logger = get_logger("templates")

    @classmethod
    def load(cls, registry: Registry, base_dir: Path | str, *, strict: bool = False) -> "StoryTemplates":
        templates = cls(base_dir, strict=strict)
        for component in registry:
            if component.can_ssr:
                templates.add(component)
        return templates

    def add(self, component: ComponentGroup) -> bool:
        """Load the component's story template; a broken template only disables its stories."""
        if not component.story_template_path or not component.component_template_path:
            return False
        try:
            library = self._env.get_template(component.component_template_path).module
            template = self._env.get_template(component.story_template_path)
        except (TemplateError, OSError) as exc:
            self.logger.warning("Server templates for %s failed to load: %s", component.name, exc)
            return False
        self._templates[component.name] = template
        self._libraries[component.name] = library
        self.logger.debug(
            "Loaded %s with story blocks: %s",
            component.story_template_path,
            ", ".join(sorted(template.blocks)) or "(none)",
        )
        return True

    def story_keys(self, component: str) -> FrozenSet[str]:
        template = self._templates.get(component)
        return frozenset(template.blocks) if template is not None else frozenset()

    def has_story(self, component: str, story_key: str) -> bool:
        return story_key in self.story_keys(component)

    def render_story(self, component: str, story_key: str, args: Mapping[str, Any], *, theme: str) -> Markup:
        """Render one story block, raising the sandbox error kinds on failure."""
        template = self._templates.get(component)
        if template is None or story_key not in template.blocks:
            raise ServerTemplateUnavailable(component, story_key, f"template block {story_key!r} not found")

        variables = dict(args)
        variables["theme"] = theme
        variables["component"] = self._libraries.get(component)
        try:
            context = template.new_context(variables)
            output = "".join(template.blocks[story_key](context))
        except Exception as exc:
            self.logger.error("Story template %s/%s failed: %s", component, story_key, exc)
            raise TemplateExecutionFailure(component, story_key, exc) from exc
        return Markup(output)


__all__ = ["StoryTemplates"]
