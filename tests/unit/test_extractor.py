from deadlink_scanner.recon.extractor import (  # type: ignore[import]
    find_api_strings,
    find_urls,
    iter_api_strings,
    iter_navigable_links,
    iter_script_urls,
    parse_document,
)

NESTED = "<a href=\"/x\"><script>'/api?x=1'</script></a>"


def test_navigable_links_only_use_attributes():
    soup = parse_document(NESTED)

    assert list(iter_navigable_links(soup)) == ["/x"]


def test_api_strings_come_from_script_text():
    soup = parse_document(NESTED)

    assert list(iter_api_strings(soup)) == ["/api?x=1"]


def test_empty_attributes_yield_nothing():
    soup = parse_document('<a href="">a</a><img src="  "><a>b</a><script src="/app.js"></script>')

    assert list(iter_navigable_links(soup)) == ["/app.js"]


def test_script_urls_stop_at_quotes_and_parens():
    soup = parse_document(
        "<script>fetch('https://cdn.example.com/lib.js'); load(\"http://example.com/a?b=1\")"
        " window.open(https://example.com/p)</script>"
        "<p>https://example.com/not-in-script</p>"
    )

    assert list(iter_script_urls(soup)) == [
        "https://cdn.example.com/lib.js",
        "http://example.com/a?b=1",
        "https://example.com/p",
    ]


def test_find_urls_ignores_relative_paths():
    assert list(find_urls("var a = '/relative'; var b = 'ftp://host/file';")) == []


def test_find_api_strings_requires_query_content():
    text = "var a = '/users?id=1'; var b = '/plain'; var c = 'x?'; var d = '/q?a=1&b=2'"

    assert list(find_api_strings(text)) == ["/users?id=1", "/q?a=1&b=2"]
