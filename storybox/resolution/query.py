"""Query-string helpers that keep parameter order and repeated names."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple
from urllib.parse import urlencode

QueryItems = Sequence[Tuple[str, str]]


def first_values(items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Collapse repeated query parameters to their first value."""
    result: Dict[str, str] = {}
    for name, value in items:
        result.setdefault(name, value)
    return result


def with_param(items: QueryItems, name: str, value: str) -> List[Tuple[str, str]]:
    """Set ``name`` to a single ``value``, keeping the position of its first occurrence."""
    result: List[Tuple[str, str]] = []
    replaced = False
    for key, current in items:
        if key != name:
            result.append((key, current))
        elif not replaced:
            result.append((name, value))
            replaced = True
    if not replaced:
        result.append((name, value))
    return result


def without_params(items: QueryItems, names: Iterable[str]) -> List[Tuple[str, str]]:
    drop = set(names)
    return [(key, value) for key, value in items if key not in drop]


def build_url(path: str, items: QueryItems) -> str:
    if not items:
        return path
    return f"{path}?{urlencode(list(items))}"


__all__ = ["QueryItems", "build_url", "first_values", "with_param", "without_params"]
