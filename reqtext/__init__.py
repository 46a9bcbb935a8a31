"""reqtext: parse plain-text HTTP request descriptions."""

from reqtext.config import DEFAULT_METHODS, ParserConfig
from reqtext.errors import (
    EmptyInputError,
    MalformedDirectiveError,
    MalformedRequestLineError,
    RequestParseError,
    UnrecognizedHeaderLineError,
)
from reqtext.parser import ParsedRequest, Parser, ParseResult, parse_request

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_METHODS",
    "EmptyInputError",
    "MalformedDirectiveError",
    "MalformedRequestLineError",
    "ParsedRequest",
    "ParseResult",
    "Parser",
    "ParserConfig",
    "RequestParseError",
    "UnrecognizedHeaderLineError",
    "parse_request",
]
