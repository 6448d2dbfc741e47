"""Session-level failures that stop a crawl."""

from __future__ import annotations

from typing import Optional


class ScannerError(RuntimeError):
    """Base class for errors that terminate a crawl session."""

    termination = "error"


class InvalidTargetError(ScannerError):
    """Raised when the entry URL cannot be parsed into scheme and host."""

    termination = "invalid-url"


class TargetUnreachableError(ScannerError):
    """Raised when the entry URL liveness check gets no response."""

    termination = "unreachable"


class BanSuspectedError(ScannerError):
    """Raised when repeated 403 responses point to an IP or WAF ban."""

    termination = "ban-detected"

    def __init__(self, first_url: Optional[str]) -> None:
        super().__init__(f"IP possibly banned; first 403 at {first_url}")
        self.first_url = first_url
