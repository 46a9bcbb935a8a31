"""Classification of lines in the header section of a request."""

from __future__ import annotations

import enum
import re
from typing import NamedTuple

from reqtext.directives import DirectiveValue, coerce_value, split_directive
from reqtext.errors import MalformedDirectiveError, UnrecognizedHeaderLineError

# RFC 7230 section 3.2.6 token characters
TCHAR = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]"
TOKEN = TCHAR + "+"

_STRICT_HEADER_RE = re.compile(r"^(" + TOKEN + r"):(.*)$")
_LENIENT_HEADER_RE = re.compile(r"^\s*([^\s:]+)\s*:(.*)$")


class LineKind(enum.Enum):
    BLANK = "blank"
    COMMENT = "comment"
    DIRECTIVE = "directive"
    HEADER = "header"


class Line(NamedTuple):
    """A classified header-section line.

    ``name`` and ``value`` are only set for directives and headers; a
    directive's value is already coerced.
    """

    kind: LineKind
    number: int
    name: str | None = None
    value: DirectiveValue | None = None


def classify_line(text: str, number: int = 0, strict: bool = False) -> Line:
    """Classify one line of the header/directive section.

    Args:
        text: The line, without its newline.
        number: 1-based line number, used in error messages.
        strict: Require RFC 7230 tokens as header names.

    Returns:
        The classified line.

    Raises:
        MalformedDirectiveError: If a directive has no name or a bad value.
        UnrecognizedHeaderLineError: If the line is none of blank, comment,
            directive or header.
    """
    stripped = text.strip()
    if not stripped:
        return Line(LineKind.BLANK, number)
    if stripped.startswith("#"):
        return Line(LineKind.COMMENT, number)
    if stripped.startswith("@"):
        try:
            name, raw = split_directive(stripped[1:])
            value = coerce_value(raw)
        except MalformedDirectiveError as exc:
            raise MalformedDirectiveError(
                str(exc), line=number or None, text=text
            ) from exc
        return Line(LineKind.DIRECTIVE, number, name, value)

    pattern = _STRICT_HEADER_RE if strict else _LENIENT_HEADER_RE
    match = pattern.match(text)
    if match is None:
        raise UnrecognizedHeaderLineError(
            f"Not a header, directive or comment: {text!r}",
            line=number or None,
            text=text,
        )
    return Line(LineKind.HEADER, number, match.group(1), match.group(2).strip())
