"""Structured output of a crawl session."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .models import LinkRecord

COMPLETED = "completed"


@dataclass
class CrawlReport:
    """Everything a session gathered, including partial results of aborted runs."""

    seed_url: str = ""
    mode: str = ""
    api_endpoints: List[str] = field(default_factory=list)
    dead_links: List[LinkRecord] = field(default_factory=list)
    visited_urls: List[str] = field(default_factory=list)
    allowed_hosts: List[str] = field(default_factory=list)
    termination: str = COMPLETED
    first_forbidden_url: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.termination == COMPLETED

    @property
    def ban_detected(self) -> bool:
        return self.termination == "ban-detected"

    def to_json(self) -> str:
        data = {
            "seed_url": self.seed_url,
            "modo": self.mode,
            "encerramento": self.termination,
            "primeiro_403": self.first_forbidden_url,
            "links_quebrados": [record.to_dict() for record in self.dead_links],
            "endpoints_api": list(self.api_endpoints),
            "urls_visitadas": list(self.visited_urls),
            "dominios_permitidos": sorted(self.allowed_hosts),
        }
        return json.dumps(data, indent=4)

    def save(self, path: Path) -> None:
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "CrawlReport":
        raw = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            seed_url=raw.get("seed_url", ""),
            mode=raw.get("modo", ""),
            api_endpoints=list(raw.get("endpoints_api", [])),
            dead_links=[LinkRecord.from_dict(item) for item in raw.get("links_quebrados", [])],
            visited_urls=list(raw.get("urls_visitadas", [])),
            allowed_hosts=sorted(raw.get("dominios_permitidos", [])),
            termination=raw.get("encerramento", COMPLETED),
            first_forbidden_url=raw.get("primeiro_403"),
        )
