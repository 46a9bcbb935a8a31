"""Request target decomposition.

Splits the target of a request line into the URL parts a client needs.
Absolute URLs are validated and split by urllib3, with the port and path
kept as written; anything without a scheme is a bare path and is passed
through untouched.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from reqtext.errors import MalformedRequestLineError

_ABSOLUTE_URL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_AUTHORITY_RE = re.compile(
    r"^[A-Za-z][A-Za-z0-9+.\-]*://([^\\/?#]*)(.*)$", re.DOTALL
)
_PORT_RE = re.compile(r":(\d+)$")


class UrlParts(NamedTuple):
    """The pieces of a request target.

    All fields except ``path`` are None for a path-only target.
    """

    protocol: str | None
    auth: str | None
    host: str | None
    hostname: str | None
    port: str | None
    path: str


def is_absolute_url(target: str) -> bool:
    """Return True if *target* starts with ``scheme://``."""
    return _ABSOLUTE_URL_RE.match(target) is not None


def decompose_url(target: str) -> UrlParts:
    """Decompose a request target into protocol, auth, host and path.

    Args:
        target: A full URL (``https://user:pw@host:8443/p?q=1``) or a
            bare path (``/p?q=1``).

    Returns:
        The target's parts. ``protocol`` keeps its trailing colon
        (``"https:"``), ``port`` is a string and only set when written
        explicitly, and ``path`` includes the query string.

    Raises:
        MalformedRequestLineError: If the target looks like a URL but
            urllib3 cannot parse it, or it has no host.
    """
    if not is_absolute_url(target):
        return UrlParts(None, None, None, None, None, target)

    try:
        url = parse_url(target)
    except LocationParseError as exc:
        raise MalformedRequestLineError(
            f"Invalid URL {target!r}", text=target
        ) from exc

    if not url.host:
        raise MalformedRequestLineError(
            f"URL has no host: {target!r}", text=target
        )

    # urllib3 validates and splits; port and path are reported as written
    authority, rest = _AUTHORITY_RE.match(target).groups()
    port = None
    if url.port is not None:
        port = _PORT_RE.search(authority.rpartition("@")[2]).group(1)
    host = f"{url.host}:{port}" if port is not None else url.host
    hostname = url.host[1:-1] if url.host.startswith("[") else url.host

    path = rest.partition("#")[0]
    if not path.startswith("/"):
        path = "/" + path

    return UrlParts(
        protocol=f"{url.scheme}:",
        auth=url.auth,
        host=host,
        hostname=hostname,
        port=port,
        path=path,
    )
