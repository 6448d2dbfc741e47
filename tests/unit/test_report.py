import json

from tests.helpers.scanner_imports import CrawlReport, LinkRecord


def _build_report() -> CrawlReport:
    return CrawlReport(
        seed_url="https://app",
        mode="dead-link-scan",
        api_endpoints=["https://app/api?id=1"],
        dead_links=[
            LinkRecord("https://app/", "https://app/missing", "hard-404", 404),
            LinkRecord("", "https://app/", "soft-404-similarity", 200),
        ],
        visited_urls=["https://app/"],
        allowed_hosts=["api.app", "app"],
        termination="ban-detected",
        first_forbidden_url="https://app/admin",
    )


def test_report_to_json_keeps_discovery_order():
    data = json.loads(_build_report().to_json())

    assert data["seed_url"] == "https://app"
    assert data["encerramento"] == "ban-detected"
    assert data["primeiro_403"] == "https://app/admin"
    assert [item["url"] for item in data["links_quebrados"]] == [
        "https://app/missing",
        "https://app/",
    ]
    assert data["links_quebrados"][0]["status"] == 404
    assert data["endpoints_api"] == ["https://app/api?id=1"]


def test_report_save_and_load(tmp_path):
    report = _build_report()
    path = tmp_path / "report.json"
    report.save(path)

    loaded = CrawlReport.load(path)
    assert loaded == report
    assert loaded.ban_detected
    assert not loaded.completed


def test_link_record_describe():
    record = LinkRecord("https://app/", "https://app/x", "timeout")

    assert record.describe() == "https://app/  ==>  https://app/x"
