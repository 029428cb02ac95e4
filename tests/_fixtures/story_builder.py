"""Helper utilities for constructing throwaway component trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from storybox.config import SandboxConfig, default_config
from storybox.discovery import DiscoveryResult, StoryScanner
from storybox.sandbox import Sandbox, build_sandbox

SAMPLE_TREE: Mapping[str, str] = {
    "static/styles/global.css": "body { margin: 0; }\n",
    "static/components/button/button.stories.js": """
        export default { title: "Button" };

        export const Primary = {
          title: "Primary button",
          args: { label: "Click me", disabled: false, size: 2 },
        };

        export const Ghost = {
          args: { label: "Ghost" },
        };

        export const Broken = {
          args: { label: "Oops" },
        };
    """,
    "static/components/button/button.jinja": """
        {% macro button(label, disabled=false) %}<button class="btn"{% if disabled %} disabled{% endif %}>{{ label }}</button>{% endmacro %}
    """,
    "static/components/button/button.stories.jinja": """
        {% block Primary %}<div class="{{ theme }}">{{ component.button(label, disabled) }}</div>{% endblock %}
        {% block Broken %}{{ missing.attribute }}{% endblock %}
    """,
    "static/components/card/card.stories.js": """
        export const Basic = {
          args: { heading: "Hello", body: html`<p>Body</p>` },
        };
    """,
}


class StoryTreeBuilder:
    """Utility for writing files into a throwaway project and scanning it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the project root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_sample(self) -> None:
        self.write(SAMPLE_TREE)

    def components_dir(self) -> Path:
        path = self.root / "static" / "components"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def config(self) -> SandboxConfig:
        return default_config(self.root)

    def scan(self) -> DiscoveryResult:
        """Return a fresh discovery result for the project."""
        config = self.config()
        scanner = StoryScanner(config.story_extensions, config.template_extension)
        return scanner.scan(config.components_dir, config.static_dir)

    def sandbox(self) -> Sandbox:
        return build_sandbox(self.config())

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["SAMPLE_TREE", "StoryTreeBuilder"]
