"""Extraction of story argument defaults from an ``args: { ... }`` body.

Fields are pulled out in a fixed precedence order and every pass blanks the
spans it consumed, so a later, looser pattern never sees text an earlier one
already claimed:

1. one markup field (``name: html`...```), whose body may hold colons and braces
2. string fields (``name: "value"``), escaped quotes unescaped
3. boolean fields (``name: true`` / ``name: false``)
4. numeric fields (``name: 12`` / ``name: 1.5``)

Nested object literals are blanked before any pass runs, so only top-level
fields become arguments. A key claimed by an earlier pass is never
reassigned by a later one. Text that matches nothing is ignored; the parser
never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional, Tuple

from ..models import ArgumentSpec, ArgValue
from .text import blank_nested_objects, blank_span, matching_brace

_KEY = r"[A-Za-z_][A-Za-z0-9_]*"

MARKUP_FIELD = re.compile(rf"(?P<key>{_KEY}):\s*html`(?P<value>(?:\\`|[^`])*)`")
STRING_FIELD = re.compile(rf'(?P<key>{_KEY}):\s*"(?P<value>(?:\\"|[^"])*)"')
BOOLEAN_FIELD = re.compile(rf"(?P<key>{_KEY}):\s*(?P<value>true|false)\b")
NUMBER_FIELD = re.compile(rf"(?P<key>{_KEY}):\s*(?P<value>[0-9]+(?:\.[0-9]+)?)\b")

_ARG_TYPE_ENTRY = re.compile(rf"(?P<key>{_KEY})\s*:\s*{{")
_CONTROL_NAME = re.compile(r"""control:\s*["'](\w+)["']""")
_CONTROL_OBJECT = re.compile(r"""control:\s*{[^{}]*?type:\s*["'](\w+)["']""")
_OPTIONS = re.compile(r"options:\s*\[([^\]]*)\]")
_OPTION_ITEM = re.compile(r"""["']([^"']*)["']""")
_MIN = re.compile(r"\bmin:\s*(-?[0-9]+(?:\.[0-9]+)?)")
_MAX = re.compile(r"\bmax:\s*(-?[0-9]+(?:\.[0-9]+)?)")


@dataclass
class ParsedArgs:
    """Defaults and per-argument metadata extracted from one args block."""

    values: Dict[str, ArgValue] = field(default_factory=dict)
    specs: Dict[str, ArgumentSpec] = field(default_factory=dict)

    def add(self, name: str, value: ArgValue, text: str) -> bool:
        if name in self.specs:
            return False
        self.values[name] = value
        self.specs[name] = ArgumentSpec(
            name=name, type=value.type, default=value, default_text=text
        )
        return True

    def __contains__(self, name: object) -> bool:
        return name in self.specs


@dataclass(frozen=True)
class ControlHint:
    """UI control metadata from an ``argTypes`` entry."""

    control: Optional[str] = None
    options: Tuple[str, ...] = ()
    minimum: Optional[float] = None
    maximum: Optional[float] = None


def _markup_value(raw: str) -> Tuple[ArgValue, str]:
    content = raw.replace("\\`", "`")
    return ArgValue.markup(content), content


def _string_value(raw: str) -> Tuple[ArgValue, str]:
    content = raw.replace('\\"', '"')
    return ArgValue.string(content), content


def _boolean_value(raw: str) -> Tuple[ArgValue, str]:
    return ArgValue.boolean(raw == "true"), raw


def _number_value(raw: str) -> Tuple[ArgValue, str]:
    number = float(raw) if "." in raw else int(raw)
    return ArgValue.number(number), raw


_PASSES: Tuple[Tuple[re.Pattern[str], Callable[[str], Tuple[ArgValue, str]]], ...] = (
    (STRING_FIELD, _string_value),
    (BOOLEAN_FIELD, _boolean_value),
    (NUMBER_FIELD, _number_value),
)


def parse_args(block: str) -> ParsedArgs:
    """Return typed defaults and argument specs found in ``block``."""
    parsed = ParsedArgs()
    if not block or not block.strip():
        return parsed

    remaining = blank_nested_objects(block)
    markup_match = MARKUP_FIELD.search(remaining)
    if markup_match:
        value, text = _markup_value(markup_match.group("value"))
        parsed.add(markup_match.group("key"), value, text)
        remaining = blank_span(remaining, markup_match.start(), markup_match.end())

    for pattern, convert in _PASSES:
        for match in pattern.finditer(remaining):
            value, text = convert(match.group("value"))
            parsed.add(match.group("key"), value, text)
        remaining = pattern.sub(lambda match: " " * len(match.group(0)), remaining)

    return parsed


def parse_arg_types(block: str) -> Dict[str, ControlHint]:
    """Read control hints from the body of an ``argTypes: { ... }`` block."""
    hints: Dict[str, ControlHint] = {}
    position = 0
    while True:
        match = _ARG_TYPE_ENTRY.search(block, position)
        if match is None:
            break
        close = matching_brace(block, match.end() - 1)
        if close is None:
            break
        entry = block[match.end() : close]
        position = close + 1

        control_match = _CONTROL_OBJECT.search(entry) or _CONTROL_NAME.search(entry)
        options_match = _OPTIONS.search(entry)
        min_match = _MIN.search(entry)
        max_match = _MAX.search(entry)
        hints[match.group("key")] = ControlHint(
            control=control_match.group(1) if control_match else None,
            options=tuple(_OPTION_ITEM.findall(options_match.group(1))) if options_match else (),
            minimum=float(min_match.group(1)) if min_match else None,
            maximum=float(max_match.group(1)) if max_match else None,
        )
    return hints


def apply_control_hints(
    specs: Dict[str, ArgumentSpec], hints: Dict[str, ControlHint]
) -> Dict[str, ArgumentSpec]:
    """Return ``specs`` with hints attached; hints for undeclared args are dropped."""
    result = dict(specs)
    for name, hint in hints.items():
        spec = result.get(name)
        if spec is None:
            continue
        result[name] = replace(
            spec,
            control=hint.control,
            options=hint.options,
            minimum=hint.minimum,
            maximum=hint.maximum,
        )
    return result


__all__ = [
    "BOOLEAN_FIELD",
    "ControlHint",
    "MARKUP_FIELD",
    "NUMBER_FIELD",
    "ParsedArgs",
    "STRING_FIELD",
    "apply_control_hints",
    "parse_arg_types",
    "parse_args",
]
