"""Candidate URL extraction from parsed documents and script text."""

from __future__ import annotations

import re
from typing import Iterator

from bs4 import BeautifulSoup

URL_PATTERN = re.compile(r"""https?://[^\s"'()]+""")
API_PATTERN = re.compile(r"'(\S*\?\S*[^'])'")
LINK_ATTRIBUTES = ("href", "src")


def parse_document(html: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def iter_navigable_links(soup: BeautifulSoup) -> Iterator[str]:
    """Yield every non-empty ``href``/``src`` value, in document order."""

    for element in soup.find_all(True):
        for attribute in LINK_ATTRIBUTES:
            value = element.get(attribute)
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip():
                yield value.strip()


def iter_script_texts(soup: BeautifulSoup) -> Iterator[str]:
    for script in soup.find_all("script"):
        text = script.get_text()
        if text:
            yield text


def find_urls(text: str) -> Iterator[str]:
    """Absolute http(s) URLs embedded in arbitrary text."""

    for match in URL_PATTERN.finditer(text):
        yield match.group(0)


def find_api_strings(text: str) -> Iterator[str]:
    """Single-quoted strings that carry a query string, e.g. ``'/api?id=1'``."""

    for match in API_PATTERN.finditer(text):
        yield match.group(1)


def iter_script_urls(soup: BeautifulSoup) -> Iterator[str]:
    for text in iter_script_texts(soup):
        yield from find_urls(text)


def iter_api_strings(soup: BeautifulSoup) -> Iterator[str]:
    for text in iter_script_texts(soup):
        yield from find_api_strings(text)
