from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ..core.models import LinkRecord


@dataclass(slots=True)
class CrawlerRuntimeState:
    """Mutable runtime bookkeeping shared by the workers of one session."""

    seen_urls: set[str] = field(default_factory=set)
    visited_urls: list[str] = field(default_factory=list)
    dead_links: list[LinkRecord] = field(default_factory=list)
    api_paths: set[str] = field(default_factory=set)
    fetch_count: int = 0
    max_depth_reached: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def mark_seen(self, url: str, depth: int) -> bool:
        """Returns ``True`` only for the first caller that claims ``url``."""

        with self._lock:
            if url in self.seen_urls:
                return False
            self.seen_urls.add(url)
            self.max_depth_reached = max(self.max_depth_reached, depth)
            return True

    def count_fetch(self) -> None:
        with self._lock:
            self.fetch_count += 1

    def add_dead_link(self, record: LinkRecord) -> None:
        with self._lock:
            self.dead_links.append(record)

    def add_dead_links(self, records: list[LinkRecord]) -> None:
        if not records:
            return
        with self._lock:
            self.dead_links.extend(records)

    def add_api_path(self, path: str) -> None:
        with self._lock:
            self.api_paths.add(path)

    def record_visited(self, url: str) -> None:
        with self._lock:
            self.visited_urls.append(url)

    def snapshot_dead_links(self) -> list[LinkRecord]:
        with self._lock:
            return list(self.dead_links)

    def snapshot_api_paths(self) -> list[str]:
        with self._lock:
            return sorted(self.api_paths)

    def snapshot_visited(self) -> list[str]:
        with self._lock:
            return list(self.visited_urls)
