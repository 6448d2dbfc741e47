"""Helper utilities used by recon modules."""

from __future__ import annotations

from http.cookies import CookieError, SimpleCookie
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse


def parse_cookie_header(raw: Optional[str], domain: Optional[str] = None) -> list[dict]:
    """Turns a ``k=v; k2=v2`` header value into cookie dictionaries."""

    if not raw:
        return []

    cookies: list[dict] = []
    for piece in raw.split(";"):
        name, sep, value = piece.strip().partition("=")
        if not sep or not name.strip():
            continue
        jar = SimpleCookie()
        try:
            jar[name.strip()] = value.strip()
        except CookieError:
            # SimpleCookie rejects some legal-in-practice names; keep the raw pair.
            cookies.append(_cookie_dict(name.strip(), value.strip(), domain))
            continue
        for morsel in jar.values():
            cookies.append(_cookie_dict(morsel.key, morsel.value, domain))
    return cookies


def _cookie_dict(name: str, value: str, domain: Optional[str]) -> dict:
    cookie = {"name": name, "value": value}
    if domain:
        cookie["domain"] = domain
    return cookie


def parse_header_pairs(raw: str) -> dict[str, str]:
    """Parses ``key=value`` pairs separated by commas into a header mapping."""

    headers: dict[str, str] = {}
    if not raw:
        return headers

    for pair in raw.split(","):
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"invalid pair: {pair}")
        headers[key.strip()] = value.strip()
    return headers


def normalize_url(base_url: str, candidate: Optional[str]) -> Optional[str]:
    """Resolves ``candidate`` against ``base_url`` and strips the fragment.

    Returns ``None`` for empty candidates and for anything that does not end
    up as an absolute http(s) URL (``mailto:``, ``javascript:``, ...).
    """

    if not candidate:
        return None
    candidate = candidate.strip()
    if not candidate or candidate.startswith("#"):
        return None

    try:
        parsed = urlparse(urljoin(base_url, candidate))
        hostname = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in {"http", "https"} or not hostname:
        return None

    sanitized = parsed._replace(
        scheme=parsed.scheme.lower(),
        netloc=parsed.netloc.lower(),
        path=parsed.path or "/",
        fragment="",
    )
    return urlunparse(sanitized)
