"""Configuration loading and CLI parsing utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv

from ..recon.utils import parse_header_pairs

ScanMode = Literal["dead-link-scan", "api-scan"]
ForbiddenPolicy = Literal["html-only", "any"]

DEAD_LINK_SCAN: ScanMode = "dead-link-scan"
API_SCAN: ScanMode = "api-scan"

DEFAULT_BASELINE_MARKER = "<script>alert(1)</script>"

# API scans always run with this fixed traversal profile.
API_SCAN_DEPTH = 10
API_SCAN_CONCURRENCY = 10
API_SCAN_DELAY = 1.5


@dataclass(slots=True)
class CrawlConfig:
    """Holds runtime options for a single crawl session."""

    target_url: str
    mode: ScanMode = DEAD_LINK_SCAN
    max_depth: int = 3
    concurrency: int = 3
    delay: float = 1.0
    cookie: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    trigger_waf: bool = True
    dynamic_scope: bool = True
    ban_threshold: int = 10
    similarity_threshold: float = 0.99
    forbidden_policy: ForbiddenPolicy = "html-only"
    request_timeout: float = 12.0
    probe_timeout: float = 6.0
    baseline_marker: str = DEFAULT_BASELINE_MARKER
    report_path: Path = field(default_factory=lambda: Path("relatorio_links.json"))

    def __post_init__(self) -> None:
        if self.mode not in (DEAD_LINK_SCAN, API_SCAN):
            raise ValueError(f"Unknown scan mode: {self.mode!r}")
        if self.forbidden_policy not in ("html-only", "any"):
            raise ValueError(f"Unknown forbidden policy: {self.forbidden_policy!r}")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth cannot be negative")
        if self.ban_threshold < 1:
            raise ValueError("ban_threshold must be at least 1")
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be within [0, 1]")

    @property
    def is_api_scan(self) -> bool:
        return self.mode == API_SCAN

    def for_api_scan(self) -> "CrawlConfig":
        """Return a copy using the fixed API-scan traversal profile."""

        return replace(
            self,
            mode=API_SCAN,
            max_depth=API_SCAN_DEPTH,
            concurrency=API_SCAN_CONCURRENCY,
            delay=API_SCAN_DELAY,
            trigger_waf=False,
            dynamic_scope=False,
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def load_configuration(
    target_url: str,
    report_name: str = "relatorio_links.json",
    *,
    mode: ScanMode = DEAD_LINK_SCAN,
    max_depth: Optional[int] = None,
    concurrency: Optional[int] = None,
    delay: Optional[float] = None,
    cookie: Optional[str] = None,
    headers: Optional[Mapping[str, str] | str] = None,
    trigger_waf: bool = True,
    dynamic_scope: bool = True,
    ban_threshold: Optional[int] = None,
    similarity_threshold: Optional[float] = None,
    forbidden_policy: ForbiddenPolicy = "html-only",
) -> CrawlConfig:
    """Builds a ``CrawlConfig`` from CLI input and environment variables."""

    load_dotenv()  # Loads .env values if present

    if headers is None:
        headers = os.getenv("CRAWL_HEADERS") or {}
    if isinstance(headers, str):
        headers = parse_header_pairs(headers)

    config = CrawlConfig(
        target_url=target_url.rstrip("/"),
        mode=mode,
        max_depth=max_depth if max_depth is not None else _env_int("CRAWL_DEPTH", 3),
        concurrency=concurrency if concurrency is not None else _env_int("CRAWL_CONCURRENCY", 3),
        delay=delay if delay is not None else _env_float("CRAWL_DELAY", 1.0),
        cookie=cookie or os.getenv("SESSION_COOKIE") or None,
        headers=dict(headers),
        trigger_waf=trigger_waf,
        dynamic_scope=dynamic_scope,
        ban_threshold=ban_threshold if ban_threshold is not None else _env_int("BAN_THRESHOLD", 10),
        similarity_threshold=(
            similarity_threshold
            if similarity_threshold is not None
            else _env_float("SIMILARITY_THRESHOLD", 0.99)
        ),
        forbidden_policy=forbidden_policy,
        report_path=Path(report_name).resolve(),
    )

    if config.is_api_scan:
        return config.for_api_scan()
    return config
