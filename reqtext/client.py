"""Bridge from a parsed request to the ``requests`` library.

Builds an unsent ``requests.Request`` from a ``ParsedRequest``; sending it
(and everything about the response) is left to the caller.
"""

from __future__ import annotations

import logging
from urllib.parse import unquote

import requests

from reqtext.parser import ParsedRequest

logger = logging.getLogger(__name__)

# Headers requests recomputes from the URL and body
DERIVED_HEADERS = frozenset({"host", "content-length"})


def build_url(
    parsed: ParsedRequest,
    target_host: str | None = None,
    use_https: bool = True,
) -> str:
    """Construct the full URL for a parsed request.

    An absolute request line wins. For a path-only request the host comes
    from *target_host*, or failing that from the request's ``Host`` header.

    Args:
        parsed: The parsed request.
        target_host: Domain or IP to use for path-only requests.
        use_https: Scheme for path-only requests (default HTTPS).

    Returns:
        The fully-qualified URL string.

    Raises:
        ValueError: If the request is path-only and no host is known.
    """
    if parsed.url is not None:
        return parsed.url

    host = target_host or parsed.get_header("Host")
    if not host:
        raise ValueError(
            f"Cannot build a URL for {parsed.path!r} without a target host."
        )
    scheme = "https" if use_https else "http"
    host = host.strip().rstrip("/")
    path = parsed.path
    if not path.startswith("/"):
        path = "/" + path
    return f"{scheme}://{host}{path}"


def build_request(
    parsed: ParsedRequest,
    body: str = "",
    target_host: str | None = None,
    use_https: bool = True,
) -> requests.Request:
    """Build an unsent ``requests.Request`` for a parsed request.

    ``Host`` and ``Content-Length`` are dropped so requests derives them
    from the URL and body. Userinfo in the URL becomes basic auth.

    Args:
        parsed: The parsed request.
        body: The request body; empty means no body.
        target_host: See ``build_url``.
        use_https: See ``build_url``.

    Returns:
        A ``requests.Request``; call ``.prepare()`` or hand it to a
        ``requests.Session``.
    """
    url = build_url(parsed, target_host, use_https)
    headers = {
        key: value
        for key, value in parsed.headers.items()
        if key.lower() not in DERIVED_HEADERS
    }

    auth = None
    if parsed.auth:
        user, _, password = parsed.auth.partition(":")
        auth = (unquote(user), unquote(password))
        # Userinfo travels as basic auth, not in the URL
        url = url.replace(f"{parsed.auth}@", "", 1)

    logger.debug("Built %s %s with %d headers", parsed.method, url, len(headers))
    return requests.Request(
        method=parsed.method,
        url=url,
        headers=headers,
        data=body or None,
        auth=auth,
    )
