from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import urlparse

import tldextract

logger = logging.getLogger(__name__)

# Bundled public suffix snapshot only; resolving scope never hits the network.
_EXTRACT = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())


def registrable_domain(host: str) -> Optional[str]:
    """Effective TLD plus one label (``api.example.co.uk`` -> ``example.co.uk``)."""

    hostname = (host or "").split(":", 1)[0].strip().lower().rstrip(".")
    if not hostname:
        return None
    try:
        result = _EXTRACT(hostname)
    except Exception:
        logger.debug("Could not resolve registrable domain for %s", host, exc_info=True)
        return None
    return result.top_domain_under_public_suffix or None


class AllowedHostSet:
    """Hostnames the traversal may visit. Safe under concurrent read/add."""

    def __init__(self, hosts: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._hosts: set[str] = {host.lower() for host in hosts if host}

    def __contains__(self, host: object) -> bool:
        if not isinstance(host, str):
            return False
        with self._lock:
            return host.lower() in self._hosts

    def add(self, host: str) -> bool:
        """Adds ``host``; returns ``False`` when it was already present."""

        normalized = host.lower()
        with self._lock:
            if normalized in self._hosts:
                return False
            self._hosts.add(normalized)
            return True

    def snapshot(self) -> list[str]:
        with self._lock:
            return sorted(self._hosts)

    def is_allowed(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        if parsed.scheme not in {"http", "https"}:
            return False
        return (parsed.hostname or "") in self


@dataclass(slots=True)
class ScopeExpander:
    """Widens the allowed hosts to sibling subdomains of the entry host."""

    origin_host: str
    allowed_hosts: AllowedHostSet
    registrable: Optional[str] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.registrable = registrable_domain(self.origin_host)

    def maybe_add(self, candidate_url: str) -> bool:
        """Adds the candidate's host when it belongs to the entry's registrable domain."""

        try:
            hostname = (urlparse(candidate_url).hostname or "").lower()
        except ValueError:
            return False
        if not hostname or not self.registrable:
            return False

        if hostname != self.registrable and not hostname.endswith("." + self.registrable):
            return False

        added = self.allowed_hosts.add(hostname)
        if added:
            logger.info("Added domain to allowed list: %s", hostname)
        return added
