from deadlink_scanner import cli  # type: ignore[import]
from deadlink_scanner.core.report import CrawlReport  # type: ignore[import]

from tests.helpers.scanner_imports import LinkRecord


def test_parse_arguments_maps_flags():
    args = cli.parse_arguments(
        ["-u", "https://example.com", "-m", "api", "-d", "2", "-H", "X-A=1,X-B=2", "--no-waf"]
    )

    assert args.url == "https://example.com"
    assert cli.MODES[args.mode] == "api-scan"
    assert args.depth == 2
    assert args.headers == {"X-A": "1", "X-B": "2"}
    assert args.no_waf is True


def test_print_report_lists_dead_links(capsys):
    report = CrawlReport(
        seed_url="https://example.com",
        mode="dead-link-scan",
        dead_links=[LinkRecord("https://example.com/", "https://example.com/x", "hard-404", 404)],
    )

    cli.print_report(report)

    output = capsys.readouterr().out
    assert "https://example.com/  ==>  https://example.com/x" in output


def test_run_cli_saves_report(monkeypatch, tmp_path):
    report_path = tmp_path / "out.json"
    seen = {}

    class DummySpider:
        def __init__(self, config, progress=None):
            seen["config"] = config

        def run(self):
            return CrawlReport(seed_url=seen["config"].target_url, mode=seen["config"].mode)

    monkeypatch.setattr(cli, "Spider", DummySpider)
    monkeypatch.setattr("deadlink_scanner.core.config.load_dotenv", lambda *_a, **_k: False)

    report = cli.run_cli(["-u", "https://example.com/", "--report", str(report_path), "-p", "4"])

    assert report.completed
    assert seen["config"].concurrency == 4
    assert report_path.exists()
