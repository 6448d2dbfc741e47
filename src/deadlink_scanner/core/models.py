"""Shared data structures used across the crawler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

LinkReason = Literal[
    "hard-404",
    "forbidden",
    "soft-404-similarity",
    "timeout",
    "network-error",
    "unreachable",
]

HARD_404: LinkReason = "hard-404"
FORBIDDEN: LinkReason = "forbidden"
SOFT_404: LinkReason = "soft-404-similarity"
TIMEOUT: LinkReason = "timeout"
NETWORK_ERROR: LinkReason = "network-error"
UNREACHABLE: LinkReason = "unreachable"


@dataclass(frozen=True, slots=True)
class LinkRecord:
    """A dead or suspect link together with the page that referenced it."""

    referrer: str
    url: str
    reason: LinkReason
    status: Optional[int] = None

    def describe(self) -> str:
        return f"{self.referrer}  ==>  {self.url}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "referrer": self.referrer,
            "url": self.url,
            "reason": self.reason,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LinkRecord":
        return cls(
            referrer=raw.get("referrer", ""),
            url=raw["url"],
            reason=raw["reason"],
            status=raw.get("status"),
        )
