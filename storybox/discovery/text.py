"""Brace matching over JavaScript-like source text.

Only delimiting is supported: quoted strings, template literals and comments
are skipped so braces inside them do not count. Nothing is evaluated.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

_QUOTES = {'"', "'", "`"}


def _skip_quoted(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return len(text)


def _skip_comment(text: str, start: int) -> int:
    if text.startswith("//", start):
        end = text.find("\n", start)
        return len(text) if end == -1 else end + 1
    end = text.find("*/", start + 2)
    return len(text) if end == -1 else end + 2


def matching_brace(text: str, open_index: int) -> Optional[int]:
    """Return the index of the ``}`` closing the ``{`` at ``open_index``."""
    if open_index >= len(text) or text[open_index] != "{":
        return None
    depth = 0
    index = open_index
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            index = _skip_quoted(text, index)
            continue
        if text.startswith(("//", "/*"), index):
            index = _skip_comment(text, index)
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return None


def braced_body(text: str, pattern: re.Pattern[str], start: int = 0) -> Optional[Tuple[int, int]]:
    """Find ``pattern`` (which must end on ``{``) and return the inner span of its braces.

    Returns ``None`` when the pattern does not occur and ``(-1, -1)`` when it
    occurs but the braces are never closed.
    """
    match = pattern.search(text, start)
    if match is None:
        return None
    open_index = match.end() - 1
    close_index = matching_brace(text, open_index)
    if close_index is None:
        return (-1, -1)
    return (open_index + 1, close_index)


def blank_span(text: str, start: int, end: int) -> str:
    """Replace ``text[start:end]`` with spaces, keeping offsets stable."""
    return text[:start] + " " * (end - start) + text[end:]


def blank_comments(text: str) -> str:
    """Replace ``//`` and ``/* */`` comments with spaces.

    Quoted strings and template literals are left alone, so ``"http://x"``
    survives. Newlines inside comments are kept and offsets never move.
    """
    chars = list(text)
    index = 0
    while index < len(text):
        if text[index] in _QUOTES:
            index = _skip_quoted(text, index)
            continue
        if text.startswith(("//", "/*"), index):
            end = _skip_comment(text, index)
            for position in range(index, end):
                if chars[position] != "\n":
                    chars[position] = " "
            index = end
            continue
        index += 1
    return "".join(chars)


def blank_nested_objects(text: str) -> str:
    """Blank every ``{...}`` span outside strings and comments, braces included.

    An unclosed ``{`` blanks the rest of the text.
    """
    index = 0
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            index = _skip_quoted(text, index)
            continue
        if text.startswith(("//", "/*"), index):
            index = _skip_comment(text, index)
            continue
        if char == "{":
            close = matching_brace(text, index)
            end = len(text) if close is None else close + 1
            text = blank_span(text, index, end)
            index = end
            continue
        index += 1
    return text


__all__ = ["blank_comments", "blank_nested_objects", "blank_span", "braced_body", "matching_brace"]
