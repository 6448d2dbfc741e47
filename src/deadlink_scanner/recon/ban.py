"""Circuit breaker for sustained 403 responses."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.errors import BanSuspectedError

logger = logging.getLogger(__name__)

Reprobe = Callable[[], Optional[int]]


class BanDetector:
    """Counts 403 responses across workers and re-probes the entry URL.

    Every state change happens under one lock, including the re-probe, so at
    most one worker can observe the threshold and act on it.
    """

    def __init__(self, threshold: int, reprobe: Reprobe) -> None:
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self._reprobe = reprobe
        self._lock = threading.Lock()
        self._count = 0
        self._first_url: Optional[str] = None
        self._tripped = False

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def first_url(self) -> Optional[str]:
        with self._lock:
            return self._first_url

    @property
    def tripped(self) -> bool:
        with self._lock:
            return self._tripped

    def on_forbidden(self, url: str) -> None:
        """Records a 403; raises :class:`BanSuspectedError` once a ban is confirmed."""

        with self._lock:
            if self._tripped:
                raise BanSuspectedError(self._first_url)

            self._count += 1
            if self._count == 1:
                self._first_url = url
            if self._count < self.threshold:
                return

            status = self._reprobe()
            if status == 403:
                self._tripped = True
                logger.warning(
                    "IP possibly banned after %d forbidden responses; first 403 at %s",
                    self._count,
                    self._first_url,
                )
                raise BanSuspectedError(self._first_url)
            if status == 200:
                logger.debug("Entry URL still reachable, resetting forbidden counter")
                self._reset()

    def on_response(self, url: str, status: int) -> None:
        """A non-403 for the streak's first URL ends the streak."""

        if status == 403:
            return
        with self._lock:
            if self._count and url == self._first_url:
                self._reset()

    def _reset(self) -> None:
        self._count = 0
        self._first_url = None
