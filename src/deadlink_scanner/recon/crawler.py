"""Crawl orchestrator: traversal, classification and ban handling for one session."""

from __future__ import annotations

import logging
import random
import re
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin, urlparse

from ..core.config import CrawlConfig
from ..core.errors import (
    BanSuspectedError,
    InvalidTargetError,
    ScannerError,
    TargetUnreachableError,
)
from ..core.models import FORBIDDEN, HARD_404, NETWORK_ERROR, SOFT_404, TIMEOUT, LinkRecord
from ..core.report import CrawlReport
from .ban import BanDetector
from .extractor import iter_api_strings, iter_navigable_links, iter_script_texts, parse_document
from .http import FetchError, FetchResult, HttpClient
from .similarity import is_soft_404
from .state import CrawlerRuntimeState
from .targeting import AllowedHostSet, ScopeExpander
from .utils import normalize_url, parse_cookie_header
from .verifier import Fetcher, VerificationProbe

logger = logging.getLogger(__name__)

JS_FILE_PATTERN = re.compile(r"\.js")
SKIP_VISIT_PATTERN = re.compile(r"\.pdf")
BASELINE_PATH = "/page?param="

ProgressCallback = Callable[[str, str], None]


@dataclass(frozen=True, slots=True)
class VisitRequest:
    url: str
    depth: int
    referrer: str = ""


class Spider:
    """Crawls one entry URL and collects dead links or API endpoints."""

    def __init__(
        self,
        config: CrawlConfig,
        *,
        client: Optional[Fetcher] = None,
        probe_client: Optional[Fetcher] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.config = config
        # Left empty for unparseable entries; run() then aborts with invalid-url.
        self._scheme = self._host = self._hostname = ""
        try:
            parsed = urlparse(config.target_url)
            self._hostname = (parsed.hostname or "").lower()
            self._scheme = (parsed.scheme or "").lower()
            self._host = (parsed.netloc or "").lower()
        except ValueError:
            logger.debug("Unparseable entry URL %r", config.target_url)

        self._owned_clients: list[HttpClient] = []
        if client is None:
            client = HttpClient(
                cookies=parse_cookie_header(config.cookie, self._hostname),
                headers=config.headers,
            )
            self._owned_clients.append(client)
        if probe_client is None:
            probe_client = HttpClient()
            self._owned_clients.append(probe_client)
        self._client = client
        self._probe_client = probe_client
        self._progress = progress

        self._halted = threading.Event()
        self._state = CrawlerRuntimeState()
        self.allowed_hosts = AllowedHostSet([self._hostname])
        self._scope = ScopeExpander(self._hostname, self.allowed_hosts)
        self._verifier = VerificationProbe(
            probe_client,
            timeout=config.probe_timeout,
            forbidden_policy=config.forbidden_policy,
            halted=self._halted,
        )
        self._ban = BanDetector(config.ban_threshold, self._reprobe_entry)
        self.baseline = b""

    @property
    def runtime_state(self) -> CrawlerRuntimeState:
        """Return the current mutable runtime state for observability tools."""

        return self._state

    @property
    def ban_detector(self) -> BanDetector:
        return self._ban

    @property
    def halted(self) -> bool:
        return self._halted.is_set()

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------
    def run(self) -> CrawlReport:
        report = CrawlReport(seed_url=self.config.target_url, mode=self.config.mode)

        try:
            self._check_target()
            if not self.config.is_api_scan and self.config.trigger_waf:
                self.baseline = self._probe_baseline()
            self._traverse()
        except BanSuspectedError as exc:
            report.termination = exc.termination
            report.first_forbidden_url = exc.first_url
            self._notify("ban", exc.first_url or "")
        except ScannerError as exc:
            logger.error("Crawl aborted: %s", exc)
            report.termination = exc.termination
        finally:
            for client in self._owned_clients:
                client.close()

        report.dead_links = self._state.snapshot_dead_links()
        report.api_endpoints = self._build_endpoints()
        report.visited_urls = self._state.snapshot_visited()
        report.allowed_hosts = self.allowed_hosts.snapshot()
        self._notify("done", report.termination)
        return report

    def _check_target(self) -> None:
        if self._scheme not in {"http", "https"} or not self._hostname:
            raise InvalidTargetError(f"Invalid entry URL: {self.config.target_url!r}")

        try:
            self._probe_client.fetch(
                self.config.target_url, timeout=self.config.probe_timeout, read_body=False
            )
        except FetchError as exc:
            raise TargetUnreachableError(f"Connection failed for {self.config.target_url}: {exc}") from exc

    def _probe_baseline(self) -> bytes:
        url = f"{self._scheme}://{self._host}{BASELINE_PATH}{self.config.baseline_marker}"
        try:
            result = self._probe_client.fetch(url, timeout=self.config.probe_timeout)
        except FetchError:
            logger.debug("Baseline probe failed; soft-404 detection disabled", exc_info=True)
            return b""
        return result.body or b""

    def _traverse(self) -> None:
        entry = normalize_url(self.config.target_url, self.config.target_url)
        if entry is None:
            raise InvalidTargetError(f"Invalid entry URL: {self.config.target_url!r}")

        ban_error: Optional[BanSuspectedError] = None
        pending: dict[Future, VisitRequest] = {}

        with ThreadPoolExecutor(max_workers=self.config.concurrency) as executor:
            try:
                self._admit(VisitRequest(entry, 1), executor, pending)
                while pending:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        pending.pop(future)
                        if future.cancelled():
                            continue
                        try:
                            children = future.result()
                        except BanSuspectedError as exc:
                            if ban_error is None:
                                ban_error = exc
                                self._halt(pending)
                            continue
                        if self._halted.is_set():
                            continue
                        for child in children:
                            self._admit(child, executor, pending)
            except BaseException:
                self._halt(pending)
                raise

        if ban_error is not None:
            raise ban_error

    def _halt(self, pending: dict[Future, VisitRequest]) -> None:
        self._halted.set()
        for future in pending:
            future.cancel()

    def _admit(
        self,
        request: VisitRequest,
        executor: ThreadPoolExecutor,
        pending: dict[Future, VisitRequest],
    ) -> None:
        if self.config.max_depth and request.depth > self.config.max_depth:
            return
        if not self.allowed_hosts.is_allowed(request.url):
            return
        if not self._state.mark_seen(request.url, request.depth):
            return
        pending[executor.submit(self._visit, request)] = request

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------
    def _visit(self, request: VisitRequest) -> list[VisitRequest]:
        if self._politeness_wait():
            return []

        self._notify("fetch", request.url)
        self._state.count_fetch()
        try:
            result = self._client.fetch(
                request.url,
                timeout=self.config.request_timeout,
                referrer=request.referrer or None,
            )
        except FetchError as exc:
            self._on_fetch_error(request, exc)
            return []

        if result.status >= 400:
            self._on_http_error(request, result)
            return []

        if self.config.is_api_scan:
            return self._collect_api(request, result)
        return self._collect_dead_links(request, result)

    def _politeness_wait(self) -> bool:
        """Sleeps a random delay; returns ``True`` if the session halted meanwhile."""

        if self._halted.is_set():
            return True
        if self.config.delay > 0:
            return self._halted.wait(random.uniform(0, self.config.delay))
        return False

    def _on_fetch_error(self, request: VisitRequest, exc: FetchError) -> None:
        logger.debug("Request to %s failed: %s", request.url, exc)
        if self.config.is_api_scan:
            return
        reason = TIMEOUT if exc.timed_out else NETWORK_ERROR
        self._state.add_dead_link(LinkRecord(request.referrer, request.url, reason))

    def _on_http_error(self, request: VisitRequest, result: FetchResult) -> None:
        if self.config.is_api_scan:
            logger.debug("Request to %s returned %s", request.url, result.status)
            return

        if result.status == 403:
            self._state.add_dead_link(LinkRecord(request.referrer, request.url, FORBIDDEN, 403))
            self._ban.on_forbidden(request.url)
            return

        self._ban.on_response(request.url, result.status)
        self._state.add_dead_link(
            LinkRecord(request.referrer, request.url, HARD_404, result.status)
        )

    def _collect_dead_links(self, request: VisitRequest, result: FetchResult) -> list[VisitRequest]:
        self._ban.on_response(request.url, result.status)

        if (
            result.status == 200
            and self.baseline
            and is_soft_404(self.baseline, result.body, self.config.similarity_threshold)
        ):
            self._state.add_dead_link(
                LinkRecord(request.referrer, request.url, SOFT_404, result.status)
            )

        if JS_FILE_PATTERN.search(request.url):
            text = result.body.decode("utf-8", errors="replace")
            self._state.add_dead_links(self._verifier.probe_all(text, request.url))

        children: list[VisitRequest] = []
        if result.is_html:
            soup = parse_document(result.body)
            for link in iter_navigable_links(soup):
                absolute = normalize_url(request.url, link)
                if not absolute:
                    continue
                if self.config.dynamic_scope and self._scope.maybe_add(absolute):
                    self._notify("scope", urlparse(absolute).hostname or "")
                if SKIP_VISIT_PATTERN.search(link):
                    continue
                children.append(VisitRequest(absolute, request.depth + 1, request.url))

            for text in iter_script_texts(soup):
                self._state.add_dead_links(self._verifier.probe_all(text, request.url))

        self._state.record_visited(request.url)
        return children

    def _collect_api(self, request: VisitRequest, result: FetchResult) -> list[VisitRequest]:
        if JS_FILE_PATTERN.search(request.url):
            logger.info("Processing js file: %s", request.url)

        children: list[VisitRequest] = []
        if result.is_html:
            soup = parse_document(result.body)
            for link in iter_navigable_links(soup):
                absolute = normalize_url(request.url, link)
                if absolute:
                    children.append(VisitRequest(absolute, request.depth + 1, request.url))
            for path in iter_api_strings(soup):
                self._state.add_api_path(path)

        self._state.record_visited(request.url)
        return children

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def _reprobe_entry(self) -> Optional[int]:
        try:
            result = self._probe_client.fetch(
                self.config.target_url, timeout=self.config.probe_timeout, read_body=False
            )
        except FetchError:
            return None
        return result.status

    def _build_endpoints(self) -> list[str]:
        origin = f"{self._scheme}://{self._host}"
        endpoints = []
        for path in self._state.snapshot_api_paths():
            if path.startswith(("http://", "https://")):
                endpoints.append(path)
            elif path.startswith("/"):
                endpoints.append(origin + path)
            else:
                endpoints.append(urljoin(origin + "/", path))
        return endpoints

    def _notify(self, event: str, detail: str) -> None:
        if self._progress is not None:
            self._progress(event, detail)


def run_session(
    config: CrawlConfig,
    *,
    client: Optional[Fetcher] = None,
    probe_client: Optional[Fetcher] = None,
    progress: Optional[ProgressCallback] = None,
) -> CrawlReport:
    """Runs a full crawl session and returns whatever it gathered."""

    return Spider(config, client=client, probe_client=probe_client, progress=progress).run()
