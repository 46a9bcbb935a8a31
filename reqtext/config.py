"""Parser configuration.

A ``ParserConfig`` is fixed when a ``Parser`` is built and read by every
parse it runs: the default method for request lines without one, the
method table that tells a method from a target, and the strict switch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from reqtext.lines import TOKEN

# Method names recognised at the start of a request line.
DEFAULT_METHODS = frozenset(
    {
        "GET",
        "HEAD",
        "POST",
        "PUT",
        "DELETE",
        "CONNECT",
        "OPTIONS",
        "TRACE",
        "PATCH",
    }
)

_TOKEN_RE = re.compile(r"^" + TOKEN + r"$")


@dataclass(frozen=True)
class ParserConfig:
    """Options shared by every parse of one ``Parser``.

    ``default_method`` is used when the request line has no method,
    ``methods`` is the table that decides whether the first token is a
    method or the target, and ``strict`` switches header names, method
    matching and the version token to RFC 7230 rules.
    """

    default_method: str = "GET"
    methods: frozenset[str] = field(default=DEFAULT_METHODS)
    strict: bool = False

    def __post_init__(self) -> None:
        # Accept any iterable of names but store a frozenset.
        object.__setattr__(self, "methods", frozenset(self.methods))
        if not self.methods:
            raise ValueError("Method table cannot be empty.")
        for name in self.methods:
            if not _TOKEN_RE.match(name):
                raise ValueError(f"Invalid method name: {name!r}")
        if not _TOKEN_RE.match(self.default_method or ""):
            raise ValueError(f"Invalid default method: {self.default_method!r}")

    def match_method(self, token: str) -> str | None:
        """Return the method *token* names, or None if it is not a method."""
        if token in self.methods:
            return token
        if not self.strict and token.upper() in self.methods:
            return token.upper()
        return None
