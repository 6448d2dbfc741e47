import requests

from tests.helpers.pytest_import import pytest
from deadlink_scanner.recon import http  # type: ignore[import]


class DummyResponse:
    def __init__(self, status_code=200, content=b"body", headers=None):
        self.status_code = status_code
        self._content = content
        self.headers = headers or {"Content-Type": "text/html"}
        self.content_reads = 0
        self.closed = False

    @property
    def content(self):
        self.content_reads += 1
        return self._content

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False


def _client_with(monkeypatch, outcome, **kwargs):
    client = http.HttpClient(**kwargs)
    calls = []

    def fake_get(url, headers, timeout, stream):
        calls.append({"url": url, "headers": headers, "timeout": timeout, "stream": stream})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(client._session, "get", fake_get)
    return client, calls


def test_fetch_returns_result_and_closes_response(monkeypatch):
    response = DummyResponse(200, b"<html></html>")
    client, calls = _client_with(monkeypatch, response)

    result = client.fetch("https://a.test/", timeout=5)

    assert result.status == 200
    assert result.body == b"<html></html>"
    assert result.is_html
    assert response.closed
    assert calls[0]["timeout"] == 5
    assert calls[0]["stream"] is True


def test_fetch_without_body_still_closes_response(monkeypatch):
    response = DummyResponse(403, b"denied")
    client, _ = _client_with(monkeypatch, response)

    result = client.fetch("https://a.test/x", timeout=1, read_body=False)

    assert result.status == 403
    assert result.body == b""
    assert response.content_reads == 0
    assert response.closed


def test_fetch_sends_referrer_and_custom_headers(monkeypatch):
    client, calls = _client_with(
        monkeypatch,
        DummyResponse(),
        headers={"X-Token": "abc", "User-Agent": "custom-agent"},
    )

    client.fetch("https://a.test/x", timeout=1, referrer="https://a.test/")

    sent = calls[0]["headers"]
    assert sent["Referer"] == "https://a.test/"
    assert sent["X-Token"] == "abc"
    assert sent["User-Agent"] == "custom-agent"


def test_fetch_rotates_known_user_agents(monkeypatch):
    client, calls = _client_with(monkeypatch, DummyResponse())

    client.fetch("https://a.test/", timeout=1)

    assert calls[0]["headers"]["User-Agent"] in http.USER_AGENTS
    assert "Referer" not in calls[0]["headers"]


def test_timeout_is_flagged(monkeypatch):
    client, _ = _client_with(monkeypatch, requests.ReadTimeout("too slow"))

    with pytest.raises(http.FetchError) as excinfo:
        client.fetch("https://a.test/slow", timeout=1)

    assert excinfo.value.timed_out is True
    assert excinfo.value.url == "https://a.test/slow"


def test_connection_errors_are_wrapped(monkeypatch):
    client, _ = _client_with(monkeypatch, requests.ConnectionError("refused"))

    with pytest.raises(http.FetchError) as excinfo:
        client.fetch("https://a.test/down", timeout=1)

    assert excinfo.value.timed_out is False
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_session_carries_cookies():
    client = http.HttpClient(cookies=[{"name": "session", "value": "abc", "domain": "a.test"}])

    assert client._session.cookies.get("session", domain="a.test") == "abc"
    client.close()
