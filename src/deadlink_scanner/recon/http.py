"""Thin requests wrapper used for every network fetch of a session."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

import requests

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4471.124 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)


class FetchError(Exception):
    """Raised when a request gets no HTTP response at all."""

    def __init__(self, url: str, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.url = url
        self.timed_out = timed_out


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.lower()
        return ""

    @property
    def is_html(self) -> bool:
        return "html" in self.content_type


def _prepare_session(cookies: Iterable[dict]) -> requests.Session:
    session = requests.Session()
    for cookie in cookies:
        name = cookie.get("name")
        value = cookie.get("value")
        domain = cookie.get("domain")
        if name and value:
            session.cookies.set(name, value, domain=domain)
    return session


class HttpClient:
    """Issues GET requests with a random user agent and bounded timeouts."""

    def __init__(
        self,
        *,
        cookies: Iterable[dict] = (),
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._session = _prepare_session(cookies)
        self._custom_headers = dict(headers or {})

    def fetch(
        self,
        url: str,
        *,
        timeout: float,
        referrer: Optional[str] = None,
        read_body: bool = True,
    ) -> FetchResult:
        """GET ``url``; the response is always closed before returning."""

        # Custom headers win over the rotated user agent.
        headers = {"User-Agent": random.choice(USER_AGENTS)}
        headers.update(self._custom_headers)
        if referrer:
            headers["Referer"] = referrer

        try:
            with self._session.get(url, headers=headers, timeout=timeout, stream=True) as response:
                body = response.content if read_body else b""
                return FetchResult(
                    url=url,
                    status=response.status_code,
                    headers=dict(response.headers),
                    body=body,
                )
        except requests.Timeout as exc:
            raise FetchError(url, str(exc), timed_out=True) from exc
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc

    def close(self) -> None:
        self._session.close()
