"""Directive value coercion.

Directives are ``@name: value`` lines. Their values are untyped text in the
source and are turned into booleans, numbers, lists or strings here.
"""

from __future__ import annotations

import re
from typing import List, Union

from reqtext.errors import MalformedDirectiveError

DirectiveValue = Union[bool, int, float, str, List["DirectiveValue"]]

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def split_directive(text: str) -> tuple[str, str | None]:
    """Split the text following ``@`` into a name and raw value.

    ``"followRedirects: true"`` gives ``("followRedirects", "true")`` and
    ``"flag"`` gives ``("flag", None)``.

    Raises:
        MalformedDirectiveError: If the name is empty.
    """
    name, sep, value = text.partition(":")
    name = name.strip()
    if not name:
        raise MalformedDirectiveError(
            f"Directive without a name: @{text}", text=text
        )
    return name, (value if sep else None)


def coerce_value(raw: str | None) -> DirectiveValue:
    """Convert a directive's raw value into typed data.

    Args:
        raw: The text after the directive's colon, or None for a flag.

    Returns:
        ``True`` for a flag, a bool for ``true``/``false``, an int or float
        for numeric literals, a list for ``[a, b]``, the unquoted contents
        of ``"..."``, and the trimmed text otherwise.

    Raises:
        MalformedDirectiveError: On unbalanced brackets or an
            unterminated quoted string.
    """
    if raw is None:
        return True
    text = raw.strip()
    if not text:
        return True
    if text == "true":
        return True
    if text == "false":
        return False
    if _NUMBER_RE.match(text):
        return int(text) if _INTEGER_RE.match(text) else float(text)
    if text.startswith("["):
        return _coerce_array(text)
    if text.startswith('"'):
        if len(text) < 2 or not text.endswith('"'):
            raise MalformedDirectiveError(
                f"Unterminated quoted string: {text}", text=text
            )
        return text[1:-1]
    return text


def _coerce_array(text: str) -> list[DirectiveValue]:
    if not text.endswith("]"):
        raise MalformedDirectiveError(f"Unbalanced brackets: {text}", text=text)
    inner = text[1:-1]
    if not inner.strip():
        return []
    return [_coerce_element(item, text) for item in _split_top_level(inner, text)]


def _coerce_element(item: str, source: str) -> DirectiveValue:
    if not item.strip():
        raise MalformedDirectiveError(f"Empty array element: {source}", text=source)
    return coerce_value(item)


def _split_top_level(inner: str, source: str) -> list[str]:
    """Split array contents on commas outside nested brackets and quotes."""
    items: list[str] = []
    depth = 0
    quoted = False
    start = 0
    for i, char in enumerate(inner):
        if char == '"':
            quoted = not quoted
        elif quoted:
            continue
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                raise MalformedDirectiveError(
                    f"Unbalanced brackets: {source}", text=source
                )
        elif char == "," and depth == 0:
            items.append(inner[start:i])
            start = i + 1
    if quoted:
        raise MalformedDirectiveError(
            f"Unterminated quoted string: {source}", text=source
        )
    if depth:
        raise MalformedDirectiveError(f"Unbalanced brackets: {source}", text=source)
    items.append(inner[start:])
    return items
