"""Merging of discovered argument defaults with query-string overrides."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from markupsafe import Markup

from ..models import ArgumentSpec, ArgumentType, ArgValue, NativeValue
from .query import QueryItems, first_values

RESERVED_PARAMS = frozenset({"renderMode", "theme", "componentName", "storyKey"})


@dataclass
class MergedArgs:
    """Effective argument values for one request.

    ``values`` and ``text`` are always fresh mappings owned by the request.
    ``extra`` holds pass-through parameters when no story is selected.
    """

    values: Dict[str, ArgValue] = field(default_factory=dict)
    text: Dict[str, str] = field(default_factory=dict)
    extra: List[Tuple[str, str]] = field(default_factory=list)

    def native(self) -> Dict[str, Union[NativeValue, Markup]]:
        return {name: value.native() for name, value in self.values.items()}

    def query_items(self) -> List[Tuple[str, str]]:
        return list(self.text.items()) + list(self.extra)


def coerce(arg_type: ArgumentType, raw: str) -> ArgValue:
    """Convert query text according to the declared argument type.

    Markup re-supplied through the query string is plain text, never trusted.
    Numbers that do not parse, use digit separators or are not finite stay text.
    """
    if arg_type is ArgumentType.BOOLEAN:
        return ArgValue.boolean(raw.lower() == "true")
    if arg_type is ArgumentType.NUMBER:
        if "_" in raw:
            return ArgValue.string(raw)
        try:
            number = float(raw)
        except ValueError:
            return ArgValue.string(raw)
        return ArgValue.number(number) if math.isfinite(number) else ArgValue.string(raw)
    if arg_type is ArgumentType.STRING or arg_type is ArgumentType.MARKUP:
        return ArgValue.string(raw)
    raise ValueError(f"Unknown argument type: {arg_type!r}")


def merge_args(specs: Mapping[str, ArgumentSpec], query: Mapping[str, str]) -> MergedArgs:
    """Return effective values for every declared argument.

    A boolean argument missing from the query is ``False`` whatever its
    discovered default, so unchecked checkbox controls read as off.
    """
    merged = MergedArgs()
    for name, spec in specs.items():
        raw: Optional[str] = query.get(name)
        if raw is not None:
            value = coerce(spec.type, raw)
        elif spec.type is ArgumentType.BOOLEAN:
            value = ArgValue.boolean(False)
        else:
            value = spec.default
        merged.values[name] = value
        merged.text[name] = value.as_text()
    return merged


def passthrough_params(items: QueryItems, reserved: Iterable[str] = RESERVED_PARAMS) -> List[Tuple[str, str]]:
    """Return first-valued query parameters other than the reserved routing ones."""
    skip = set(reserved)
    return [(name, value) for name, value in first_values(items).items() if name not in skip]


__all__ = [
    "MergedArgs",
    "RESERVED_PARAMS",
    "coerce",
    "merge_args",
    "passthrough_params",
]
