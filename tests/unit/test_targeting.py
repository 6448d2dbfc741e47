from deadlink_scanner.recon.targeting import (  # type: ignore[import]
    AllowedHostSet,
    ScopeExpander,
    registrable_domain,
)


def _expander(origin: str = "www.example.com") -> ScopeExpander:
    return ScopeExpander(origin, AllowedHostSet([origin]))


def test_registrable_domain_uses_public_suffixes():
    assert registrable_domain("www.example.com") == "example.com"
    assert registrable_domain("api.shop.example.co.uk") == "example.co.uk"
    assert registrable_domain("www.example.com:8443") == "example.com"


def test_registrable_domain_unresolvable_hosts():
    assert registrable_domain("") is None
    assert registrable_domain("localhost") is None
    assert registrable_domain("127.0.0.1") is None


def test_maybe_add_admits_same_organization():
    expander = _expander()

    assert expander.maybe_add("https://api.example.com/v1") is True
    assert expander.maybe_add("https://example.com/") is True
    assert "api.example.com" in expander.allowed_hosts
    assert "example.com" in expander.allowed_hosts


def test_maybe_add_rejects_foreign_domains():
    expander = _expander()

    assert expander.maybe_add("https://example.com.evil.net/") is False
    assert expander.maybe_add("https://notexample.com/") is False
    assert expander.allowed_hosts.snapshot() == ["www.example.com"]


def test_maybe_add_ignores_relative_and_known_hosts():
    expander = _expander()

    assert expander.maybe_add("/relative/path") is False
    assert expander.maybe_add("https://www.example.com/again") is False


def test_unresolvable_origin_leaves_scope_unchanged():
    expander = _expander("127.0.0.1")

    assert expander.maybe_add("http://other.example.com/") is False
    assert expander.allowed_hosts.snapshot() == ["127.0.0.1"]


def test_allowed_host_set_checks_scheme_and_host():
    hosts = AllowedHostSet(["example.com"])

    assert hosts.is_allowed("https://example.com/a")
    assert hosts.is_allowed("http://EXAMPLE.com:8080/a")
    assert not hosts.is_allowed("ftp://example.com/a")
    assert not hosts.is_allowed("https://other.com/a")
    assert hosts.add("other.com") is True
    assert hosts.add("other.com") is False
