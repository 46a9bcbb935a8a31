"""Errors raised while parsing a plain-text HTTP request.

Every parse failure is a ``RequestParseError``. It subclasses ``ValueError``
so callers that only care about "the text was bad" can keep catching that.
"""

from __future__ import annotations


class RequestParseError(ValueError):
    """Base class for all request parse failures.

    Attributes:
        line: 1-based number of the offending line, or None when the
            failure is not tied to a single line.
        text: The offending line (or value) as written.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        text: str | None = None,
    ) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
        self.text = text


class EmptyInputError(RequestParseError):
    """No non-blank content before end of input."""


class MalformedRequestLineError(RequestParseError):
    """Request line without a target, or with unexpected tokens."""


class MalformedDirectiveError(RequestParseError):
    """Unbalanced brackets, unterminated quotes or a nameless directive."""


class UnrecognizedHeaderLineError(RequestParseError):
    """A header-section line that is not a comment, directive, header or blank."""
