"""Story discovery: walks a component tree and builds the registry."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..errors import DirectoryWalkFailure, FileParseIncomplete, FileReadFailure
from ..logging import get_logger
from ..models import ArgumentSpec, ArgValue, ComponentGroup, Registry, StoryVariant
from .args import apply_control_hints, parse_arg_types, parse_args
from .text import blank_comments, blank_span, braced_body

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".storybox",
}

STORY_EXPORT = re.compile(r"export\s+const\s+([A-Za-z_][A-Za-z0-9_]*)\s*=\s*{")
STORY_TITLE = re.compile(r"""\btitle:\s*["']([^"']+)["']""")
DEFAULT_TITLE = re.compile(r"""export\s+default\s*{\s*title:\s*["']([^"']+)["']""")
ARGS_BLOCK = re.compile(r"\bargs:\s*{")
ARG_TYPES_BLOCK = re.compile(r"\bargTypes:\s*{")
PENDING_TEXT = re.compile(r"""pendingText:\s*["']([^"']+)["']""")

SQUARE_ARG = "isSquare"
SQUARE_MARKER = "Icon"
PENDING_TEXT_ARG = "pendingText"

DEFAULT_STORY_EXTENSIONS: Tuple[str, ...] = ("js", "mjs", "ts")
DEFAULT_TEMPLATE_EXTENSION = "jinja"


@dataclass(frozen=True)
class DiscoveryWarning:
    """A story file skipped or partially read during discovery."""

    path: str
    message: str
    kind: str


@dataclass
class DiscoveryResult:
    """Registry produced by a scan plus every non-fatal problem it met."""

    registry: Registry
    base_dir: Path
    warnings: List[DiscoveryWarning] = field(default_factory=list)


def _story_pattern(key: str) -> re.Pattern[str]:
    return re.compile(r"export\s+const\s+" + re.escape(key) + r"\s*=\s*{")


def _implicit_spec(name: str, value: ArgValue) -> ArgumentSpec:
    return ArgumentSpec(name=name, type=value.type, default=value, default_text=value.as_text())


def title_from_name(name: str) -> str:
    """Derive a display title from a component file stem (``icon-button`` -> ``Icon Button``)."""
    words = name.replace("-", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


class StoryScanner:
    """Walks a components directory and parses ``<name>.stories.<ext>`` files."""

    def __init__(
        self,
        story_extensions: Sequence[str] = DEFAULT_STORY_EXTENSIONS,
        template_extension: str = DEFAULT_TEMPLATE_EXTENSION,
    ) -> None:
        self.story_suffixes = tuple(f".stories.{ext.lstrip('.')}" for ext in story_extensions)
        self.template_extension = template_extension.lstrip(".")
        self.logger = get_logger("discovery")

    def scan(self, components_dir: str | Path, static_dir: str | Path | None = None) -> DiscoveryResult:
        """Return the registry for every story file under ``components_dir``."""
        root = Path(components_dir).expanduser().resolve()
        if not root.exists():
            raise DirectoryWalkFailure(root, FileNotFoundError(f"{root} does not exist"))
        if not root.is_dir():
            raise DirectoryWalkFailure(root, NotADirectoryError(f"{root} is not a directory"))

        base_dir = root
        if static_dir is not None:
            static_root = Path(static_dir).expanduser().resolve()
            if root == static_root or static_root in root.parents:
                base_dir = static_root

        self.logger.info("Discovering stories from %s", root)
        components: List[ComponentGroup] = []
        warnings: List[DiscoveryWarning] = []
        seen: Dict[str, str] = {}

        for path in self._iter_story_files(root):
            try:
                component = self._load_component(path, base_dir)
            except (FileReadFailure, FileParseIncomplete) as exc:
                self.logger.warning("Skipping %s: %s", path, exc)
                warnings.append(
                    DiscoveryWarning(path=str(path), message=str(exc), kind=type(exc).__name__)
                )
                continue

            if component is None:
                continue
            if component.name in seen:
                message = f"Component name {component.name!r} already discovered in {seen[component.name]}"
                self.logger.warning("Skipping %s: %s", path, message)
                warnings.append(DiscoveryWarning(path=str(path), message=message, kind="DuplicateComponent"))
                continue

            seen[component.name] = component.path
            components.append(component)
            self.logger.info(
                "Discovered component %s (%s) with %d stories, server render: %s",
                component.title,
                component.name,
                len(component.stories),
                component.can_ssr,
            )

        if not components:
            self.logger.warning("No component stories were discovered under %s", root)

        return DiscoveryResult(
            registry=Registry.from_components(components),
            base_dir=base_dir,
            warnings=warnings,
        )

    def _iter_story_files(self, root: Path) -> Iterator[Path]:
        def _on_error(exc: OSError) -> None:
            raise DirectoryWalkFailure(exc.filename or root, exc)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
            for filename in sorted(filenames):
                if filename.endswith(self.story_suffixes):
                    yield Path(dirpath) / filename

    def _component_name(self, path: Path) -> str:
        for suffix in self.story_suffixes:
            if path.name.endswith(suffix):
                return path.name[: -len(suffix)]
        return path.stem

    def _relative(self, path: Path, base_dir: Path) -> str:
        try:
            return path.relative_to(base_dir).as_posix()
        except ValueError:
            return path.as_posix()

    def _load_component(self, path: Path, base_dir: Path) -> Optional[ComponentGroup]:
        name = self._component_name(path)
        story_template = path.with_name(f"{name}.stories.{self.template_extension}")
        component_template = path.with_name(f"{name}.{self.template_extension}")
        can_ssr = story_template.is_file() and component_template.is_file()
        if can_ssr:
            self.logger.debug("Component %s supports server rendering", name)
        else:
            self.logger.debug(
                "Component %s has no server rendering (story template: %s, component template: %s)",
                name,
                story_template.is_file(),
                component_template.is_file(),
            )

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadFailure(path, exc) from exc

        stories = parse_stories(content, can_ssr=can_ssr, source=path)
        if not stories:
            self.logger.info("No stories found in %s; component %s not added", path, name)
            return None

        title_match = DEFAULT_TITLE.search(blank_comments(content))
        title = title_match.group(1) if title_match else title_from_name(name)

        for story in stories:
            self.logger.debug(
                "  Story %s (%s): %s",
                story.key,
                story.title,
                ", ".join(f"{arg.name}:{arg.type.value}={arg.default_text}" for arg in story.args.values()),
            )

        return ComponentGroup(
            name=name,
            title=title,
            path=self._relative(path, base_dir),
            stories=tuple(stories),
            can_ssr=can_ssr,
            story_template_path=self._relative(story_template, base_dir) if can_ssr else None,
            component_template_path=self._relative(component_template, base_dir) if can_ssr else None,
        )


def parse_stories(content: str, *, can_ssr: bool = False, source: Path | str = "<text>") -> List[StoryVariant]:
    """Parse every ``export const Name = { ... }`` declaration in ``content``.

    Comments are blanked first. ``pendingText`` is looked up across the whole
    file, not the story body, and applied to each story that does not declare
    it itself.
    """
    content = blank_comments(content)
    pending_match = PENDING_TEXT.search(content)
    pending_text = pending_match.group(1) if pending_match else None

    stories: List[StoryVariant] = []
    seen: set[str] = set()
    for export in STORY_EXPORT.finditer(content):
        key = export.group(1)
        if key in seen:
            continue
        seen.add(key)

        span = braced_body(content, _story_pattern(key))
        if span is None or span == (-1, -1):
            raise FileParseIncomplete(source, f"unterminated body for story {key!r}")
        body = content[span[0] : span[1]]

        specs: Dict[str, ArgumentSpec] = {}
        title_text = body
        args_span = braced_body(body, ARGS_BLOCK)
        if args_span == (-1, -1):
            raise FileParseIncomplete(source, f"unterminated args block for story {key!r}")
        if args_span is not None:
            specs = parse_args(body[args_span[0] : args_span[1]]).specs
            title_text = blank_span(title_text, args_span[0], args_span[1])

        types_span = braced_body(body, ARG_TYPES_BLOCK)
        if types_span is not None and types_span != (-1, -1):
            specs = apply_control_hints(specs, parse_arg_types(body[types_span[0] : types_span[1]]))
            title_text = blank_span(title_text, types_span[0], types_span[1])

        title_match = STORY_TITLE.search(title_text)
        title = title_match.group(1) if title_match else key

        if SQUARE_ARG not in specs:
            square = SQUARE_MARKER in key
            specs[SQUARE_ARG] = _implicit_spec(SQUARE_ARG, ArgValue.boolean(square))

        if pending_text is not None and PENDING_TEXT_ARG not in specs:
            specs[PENDING_TEXT_ARG] = _implicit_spec(PENDING_TEXT_ARG, ArgValue.string(pending_text))

        stories.append(
            StoryVariant(
                key=key,
                title=title,
                args=specs,
                has_csr=True,
                has_ssr=can_ssr,
                has_pending_text=pending_text is not None,
            )
        )
    return stories


def discover_stories(
    components_dir: str | Path,
    static_dir: str | Path | None = None,
    *,
    story_extensions: Sequence[str] = DEFAULT_STORY_EXTENSIONS,
    template_extension: str = DEFAULT_TEMPLATE_EXTENSION,
) -> DiscoveryResult:
    """Convenience wrapper around :class:`StoryScanner`."""
    scanner = StoryScanner(story_extensions, template_extension)
    return scanner.scan(components_dir, static_dir)


__all__ = [
    "DiscoveryResult",
    "DiscoveryWarning",
    "StoryScanner",
    "discover_stories",
    "parse_stories",
    "title_from_name",
]
