"""Plain-text HTTP request parsing engine.

Turns a hand-written request such as::

    POST https://api.example.com/cats HTTP/1.1
    Content-Type: application/json
    # comments are ignored
    @followRedirects: true
    @redirectLimit: 5

    {"name": "molly"}

into a ``ParsedRequest`` descriptor plus the body string. Lines are
consumed by a small state machine: leading blank lines are skipped, the
first non-blank line is the request line, headers/directives/comments
follow up to the first blank line, and everything after that is the body.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple, Optional

from reqtext.config import ParserConfig
from reqtext.directives import DirectiveValue
from reqtext.errors import (
    EmptyInputError,
    MalformedRequestLineError,
    RequestParseError,
)
from reqtext.lines import LineKind, classify_line
from reqtext.url import decompose_url

logger = logging.getLogger(__name__)

_STRICT_VERSION_RE = re.compile(r"^HTTP/\d\.\d$")

_MISSING = object()


@dataclass(frozen=True, repr=False)
class ParsedRequest:
    """Immutable descriptor of one parsed request.

    ``protocol``, ``auth``, ``host``, ``hostname`` and ``port`` are all None
    when the request line names a bare path. ``headers`` keeps the casing
    and order of the source; ``directives`` holds the typed ``@`` values.
    """

    method: str
    path: str
    protocol: Optional[str] = None
    auth: Optional[str] = None
    host: Optional[str] = None
    hostname: Optional[str] = None
    port: Optional[str] = None
    # mapping views are unhashable
    headers: Mapping[str, str] = dataclasses.field(
        default_factory=dict, hash=False
    )
    directives: Mapping[str, DirectiveValue] = dataclasses.field(
        default_factory=dict, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(
            self, "directives", MappingProxyType(dict(self.directives))
        )

    def __repr__(self) -> str:
        return (
            f"ParsedRequest(method={self.method!r}, "
            f"url={(self.url or self.path)!r}, "
            f"headers=<{len(self.headers)} headers>, "
            f"directives={sorted(self.directives)!r})"
        )

    @property
    def url(self) -> str | None:
        """The absolute URL, or None for a path-only request."""
        if self.protocol is None:
            return None
        auth = f"{self.auth}@" if self.auth else ""
        return f"{self.protocol}//{auth}{self.host}{self.path}"

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Look up a header without regard to case."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def get_bool(self, name: str, default: bool = False) -> bool:
        return self._get_typed(name, default, (bool,), "a boolean")

    def get_number(
        self, name: str, default: int | float | None = None
    ) -> int | float | None:
        value = self.directives.get(name, _MISSING)
        if value is _MISSING:
            return default
        # bool is an int subclass but a flag is not a number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Directive {name!r} is not a number: {value!r}")
        return value

    def get_string(self, name: str, default: str | None = None) -> str | None:
        return self._get_typed(name, default, (str,), "a string")

    def get_list(self, name: str, default: list | None = None) -> list | None:
        return self._get_typed(name, default, (list,), "an array")

    def _get_typed(self, name, default, types, kind):
        value = self.directives.get(name, _MISSING)
        if value is _MISSING:
            return default
        if not isinstance(value, types):
            raise TypeError(f"Directive {name!r} is not {kind}: {value!r}")
        return value

    def as_options(self) -> dict[str, Any]:
        """Return a flat options dict with directives merged in.

        The request fields take precedence over directives of the same name.
        """
        options: dict[str, Any] = dict(self.directives)
        options.update(
            method=self.method,
            protocol=self.protocol,
            auth=self.auth,
            host=self.host,
            hostname=self.hostname,
            port=self.port,
            path=self.path,
            headers=dict(self.headers),
        )
        return options


class ParseResult(NamedTuple):
    """Outcome of ``Parser.parse``: either ``error`` or ``request`` is None."""

    error: Optional[RequestParseError]
    request: Optional[ParsedRequest]
    body: Optional[str]


ParseCallback = Callable[
    [Optional[RequestParseError], Optional[ParsedRequest], Optional[str]], Any
]


class ParserState(enum.Enum):
    SKIPPING = "skipping"
    REQUEST_LINE = "request-line"
    HEADERS = "headers"
    BODY = "body"


class Parser:
    """Parses plain-text requests with one fixed ``ParserConfig``.

    The config is the only state a parser holds, so one instance can be
    reused, and shared between threads, freely.
    """

    def __init__(self, config: ParserConfig | None = None, **overrides: Any) -> None:
        if config is None:
            config = ParserConfig(**overrides)
        elif overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config

    def parse(
        self, text: str, callback: ParseCallback | None = None
    ) -> ParseResult:
        """Parse *text* without raising parse errors.

        Args:
            text: The request, ``\\n``-separated.
            callback: Optional ``callback(error, request, body)``, called
                exactly once before returning.

        Returns:
            ``ParseResult(None, request, body)`` on success or
            ``ParseResult(error, None, None)`` on the first failure.
        """
        try:
            request, body = self._parse(text)
        except RequestParseError as exc:
            logger.debug("Request parse failed: %s", exc)
            result = ParseResult(exc, None, None)
        else:
            result = ParseResult(None, request, body)

        if callback is not None:
            callback(*result)
        return result

    def _parse(self, text: str) -> tuple[ParsedRequest, str]:
        if not isinstance(text, str):
            raise TypeError(f"Request text must be str, not {type(text).__name__}")

        state = ParserState.SKIPPING
        fields: dict[str, Any] = {}
        headers: dict[str, str] = {}
        directives: dict[str, DirectiveValue] = {}
        body_lines: list[str] = []

        for number, line in enumerate(text.split("\n"), 1):
            if state is ParserState.SKIPPING:
                if not line.strip():
                    continue
                state = ParserState.REQUEST_LINE
                logger.debug("line %d: request line", number)

            if state is ParserState.REQUEST_LINE:
                fields = self._parse_request_line(line, number)
                state = ParserState.HEADERS
                logger.debug("line %d: entering header section", number + 1)
                continue

            if state is ParserState.HEADERS:
                classified = classify_line(line, number, self.config.strict)
                if classified.kind is LineKind.BLANK:
                    state = ParserState.BODY
                    logger.debug("line %d: entering body", number + 1)
                elif classified.kind is LineKind.DIRECTIVE:
                    if classified.name in directives:
                        logger.warning(
                            "line %d: directive @%s overrides an earlier value",
                            number,
                            classified.name,
                        )
                    directives[classified.name] = classified.value
                elif classified.kind is LineKind.HEADER:
                    if classified.name in headers:
                        logger.warning(
                            "line %d: header %s overrides an earlier value",
                            number,
                            classified.name,
                        )
                    headers[classified.name] = classified.value
                continue

            body_lines.append(line)

        if state is ParserState.SKIPPING:
            raise EmptyInputError("No request line found in input.")

        request = ParsedRequest(headers=headers, directives=directives, **fields)
        body = "\n".join(body_lines)
        logger.debug(
            "Parsed %s %s (%d headers, %d directives, %d body chars)",
            request.method,
            request.url or request.path,
            len(headers),
            len(directives),
            len(body),
        )
        return request, body

    def _parse_request_line(self, line: str, number: int) -> dict[str, Any]:
        """Split ``[METHOD] TARGET [HTTP/VERSION]`` into descriptor fields."""
        tokens = line.split()
        method = self.config.match_method(tokens[0])
        if method is None:
            method = self.config.default_method
        else:
            tokens = tokens[1:]

        if not tokens or self._is_version(tokens[0]):
            raise MalformedRequestLineError(
                f"Request line has no target: {line.strip()!r}",
                line=number,
                text=line,
            )
        target, extra = tokens[0], tokens[1:]
        if len(extra) > 1 or (extra and not self._is_version(extra[0])):
            raise MalformedRequestLineError(
                f"Unexpected tokens after target: {' '.join(extra)!r}",
                line=number,
                text=line,
            )
        if extra and self.config.strict and not _STRICT_VERSION_RE.match(extra[0]):
            raise MalformedRequestLineError(
                f"Invalid HTTP version: {extra[0]!r}", line=number, text=line
            )

        try:
            parts = decompose_url(target)
        except MalformedRequestLineError as exc:
            raise MalformedRequestLineError(
                str(exc), line=number, text=line
            ) from exc

        return dict(parts._asdict(), method=method)

    @staticmethod
    def _is_version(token: str) -> bool:
        return token.startswith("HTTP/")


def parse_request(
    text: str, config: ParserConfig | None = None
) -> tuple[ParsedRequest, str]:
    """Parse *text* and return ``(request, body)``.

    Raises:
        RequestParseError: The first problem found in the text.
    """
    result = Parser(config).parse(text)
    if result.error is not None:
        raise result.error
    return result.request, result.body
