from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from .errors import InvalidUrl

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
_WHITESPACE_RE = re.compile(r"\s")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_url(raw: str) -> str:
    """Validate user input as an absolute http(s) URL.

    A bare domain gets ``https://`` prepended. Anything else that is not an
    http(s) URL with a real host raises ``InvalidUrl``.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidUrl("Please provide a URL.")
    if _WHITESPACE_RE.search(value):
        raise InvalidUrl("URLs cannot contain spaces.")

    if not _SCHEME_RE.match(value):
        value = "https://" + value

    try:
        parsed = urlsplit(value)
        parsed.port
    except ValueError as e:
        raise InvalidUrl(f"Could not parse URL: {e}") from e

    if parsed.scheme.lower() not in _DEFAULT_PORTS:
        raise InvalidUrl("Please use an http(s) website URL.")

    host = parsed.hostname or ""
    if not host or ("." not in host and host != "localhost"):
        raise InvalidUrl("Please enter a valid website domain.")

    return urlunsplit(parsed._replace(fragment=""))


def canonicalize(url: str) -> str:
    """Stable identity form of a URL, used as the history key."""
    parsed = urlsplit(parse_url(url))
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"

    port = parsed.port
    netloc = host if port is None or port == _DEFAULT_PORTS[scheme] else f"{host}:{port}"

    path = parsed.path or "/"
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"

    return urlunsplit((scheme, netloc, path, parsed.query, ""))


def registrable_domain_guess(hostname: str) -> str:
    parts = [p for p in (hostname or "").lower().split(".") if p]
    if len(parts) <= 2:
        return ".".join(parts)
    return ".".join(parts[-2:])


def bare_host(url: str) -> str:
    host = (urlsplit(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host
