"""Core data models shared across storybox components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from markupsafe import Markup


class ArgumentType(str, Enum):
    """Semantic type inferred for a story argument."""

    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    MARKUP = "markup"


class RenderMode(str, Enum):
    """Where a story's markup is produced."""

    CSR = "csr"
    SSR = "ssr"


THEMES: Tuple[str, ...] = ("light", "dark")

NativeValue = Union[str, bool, int, float]


@dataclass(frozen=True)
class ArgValue:
    """A typed argument value; ``type`` is the tag, ``value`` the native payload.

    Markup payloads are kept as plain text and only wrapped as trusted markup
    when handed to a template.
    """

    type: ArgumentType
    value: NativeValue

    @classmethod
    def string(cls, value: str) -> "ArgValue":
        return cls(ArgumentType.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> "ArgValue":
        return cls(ArgumentType.BOOLEAN, bool(value))

    @classmethod
    def number(cls, value: Union[int, float]) -> "ArgValue":
        return cls(ArgumentType.NUMBER, value)

    @classmethod
    def markup(cls, value: str) -> "ArgValue":
        return cls(ArgumentType.MARKUP, value)

    def native(self) -> Union[NativeValue, Markup]:
        """Return the value as handed to templates and JSON configs."""
        if self.type is ArgumentType.MARKUP:
            return Markup(str(self.value))
        return self.value

    def as_text(self) -> str:
        """Return the query-string form of the value."""
        if self.type is ArgumentType.BOOLEAN:
            return "true" if self.value else "false"
        if self.type is ArgumentType.NUMBER:
            return format_number(self.value)
        return str(self.value)


def format_number(value: NativeValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ArgumentSpec:
    """Discovered metadata for one story argument."""

    name: str
    type: ArgumentType
    default: ArgValue
    default_text: str
    control: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StoryVariant:
    """One named presentational state of a component."""

    key: str
    title: str
    args: Mapping[str, ArgumentSpec] = field(default_factory=dict)
    has_csr: bool = True
    has_ssr: bool = False
    has_pending_text: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def defaults(self) -> Dict[str, ArgValue]:
        """Return a fresh mapping of argument name to default value."""
        return {name: spec.default for name, spec in self.args.items()}


@dataclass(frozen=True)
class ComponentGroup:
    """A discovered component and its story variants."""

    name: str
    title: str
    path: str
    stories: Tuple[StoryVariant, ...]
    can_ssr: bool = False
    story_template_path: Optional[str] = None
    component_template_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.can_ssr:
            return
        for story in self.stories:
            if story.has_ssr:
                raise ValueError(
                    f"Story {story.key!r} is server-rendered but component {self.name!r} is not"
                )

    def story(self, key: str) -> Optional[StoryVariant]:
        for story in self.stories:
            if story.key == key:
                return story
        return None

    def story_index(self, key: str) -> Optional[int]:
        for index, story in enumerate(self.stories):
            if story.key == key:
                return index
        return None


@dataclass(frozen=True)
class Registry:
    """Ordered, read-only collection of discovered components."""

    components: Tuple[ComponentGroup, ...] = ()

    @classmethod
    def from_components(cls, components: Sequence[ComponentGroup]) -> "Registry":
        return cls(components=tuple(components))

    def __iter__(self) -> Iterator[ComponentGroup]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)

    def index_of(self, name: str) -> Optional[int]:
        for index, component in enumerate(self.components):
            if component.name == name:
                return index
        return None

    def get(self, name: str) -> Optional[ComponentGroup]:
        index = self.index_of(name)
        return self.components[index] if index is not None else None

    def names(self) -> List[str]:
        return [component.name for component in self.components]


__all__ = [
    "ArgValue",
    "ArgumentSpec",
    "ArgumentType",
    "ComponentGroup",
    "Registry",
    "RenderMode",
    "StoryVariant",
    "THEMES",
    "format_number",
]
