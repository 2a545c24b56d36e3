"""Query-string helpers for stream URLs.

Stream URLs are rewritten one parameter at a time; every other parameter
keeps its position and value.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, quote_plus, unquote_plus, urlsplit, urlunsplit


def is_fetchable_url(url: str) -> bool:
    """Return ``True`` for absolute ``http(s)`` URLs with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def get_query_param(url: str, name: str) -> str | None:
    """Return the first value of query parameter *name*, or ``None``."""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == name:
            return value
    return None


def set_query_param(url: str, name: str, value: str) -> str:
    """Return *url* with parameter *name* set to *value*.

    An existing parameter is replaced in place (duplicates collapse to
    one); otherwise the parameter is appended.  Every other segment of the
    query string is kept byte for byte.
    """
    parts = urlsplit(url)
    pair = f"{quote_plus(name)}={quote_plus(value)}"

    segments: list[str] = []
    replaced = False
    for segment in parts.query.split("&"):
        if not segment:
            continue
        if unquote_plus(segment.split("=", 1)[0]) != name:
            segments.append(segment)
        elif not replaced:
            segments.append(pair)
            replaced = True
    if not replaced:
        segments.append(pair)

    return urlunsplit(parts._replace(query="&".join(segments)))
