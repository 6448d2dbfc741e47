"""Out-of-band checks for URLs that only appear inside script content."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Literal, Optional, Protocol
from urllib.parse import urlparse

from ..core.config import ForbiddenPolicy
from ..core.models import HARD_404, UNREACHABLE, LinkReason, LinkRecord
from .extractor import find_urls
from .http import FetchError, FetchResult

logger = logging.getLogger(__name__)

VerdictStatus = Literal["alive", "dead", "error"]
HTML_SUFFIXES = (".html", ".htm")


class Fetcher(Protocol):
    def fetch(
        self,
        url: str,
        *,
        timeout: float,
        referrer: Optional[str] = None,
        read_body: bool = True,
    ) -> FetchResult: ...


@dataclass(frozen=True, slots=True)
class Verdict:
    status: VerdictStatus
    reason: Optional[LinkReason] = None
    http_status: Optional[int] = None

    @property
    def dead(self) -> bool:
        return self.status == "dead"


ALIVE = Verdict("alive")
HALTED = Verdict("error")


def classify_status(url: str, status: int, policy: ForbiddenPolicy = "html-only") -> Verdict:
    """Maps an HTTP status of a verified URL onto a verdict.

    With the ``html-only`` policy a 403 only counts as dead for HTML
    documents; script-referenced assets behind a 403 are left alone. The
    ``any`` policy treats 403 like every other client error.
    """

    if status == 403 and policy == "html-only":
        try:
            path = urlparse(url).path.lower()
        except ValueError:
            path = ""
        if path.endswith(HTML_SUFFIXES):
            return Verdict("dead", HARD_404, status)
        return Verdict("alive", http_status=status)
    if 400 <= status < 600:
        return Verdict("dead", HARD_404, status)
    return Verdict("alive", http_status=status)


class VerificationProbe:
    """Fetches a candidate URL once and classifies it as alive or dead."""

    def __init__(
        self,
        client: Fetcher,
        *,
        timeout: float,
        forbidden_policy: ForbiddenPolicy = "html-only",
        halted: Optional[threading.Event] = None,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._policy = forbidden_policy
        self._halted = halted or threading.Event()

    def verify(self, url: str) -> Verdict:
        if self._halted.is_set():
            return HALTED
        try:
            result = self._client.fetch(url, timeout=self._timeout, read_body=False)
        except FetchError as exc:
            logger.debug("Verification of %s failed: %s", url, exc)
            return Verdict("dead", UNREACHABLE)
        return classify_status(url, result.status, self._policy)

    def probe_all(self, text: str, referrer: str) -> list[LinkRecord]:
        """Verifies every absolute URL in ``text`` and returns the dead ones."""

        records: list[LinkRecord] = []
        for url in find_urls(text):
            verdict = self.verify(url)
            if verdict.dead and verdict.reason:
                records.append(LinkRecord(referrer, url, verdict.reason, verdict.http_status))
        return records
