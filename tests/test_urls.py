import pytest

from route_mapper.crawler.urls import (
    is_same_domain,
    normalize_url,
    parse_start_url,
    route_path,
    url_key,
)

BASE = "https://example.com/docs/page"


@pytest.mark.parametrize(
    "link,expected",
    [
        ("/about", "https://example.com/about"),
        ("intro", "https://example.com/docs/intro"),
        ("../blog/", "https://example.com/blog/"),
        ("https://example.com/x?utm=1#top", "https://example.com/x"),
        ("  /padded  ", "https://example.com/padded"),
        ("//example.com/proto-relative", "https://example.com/proto-relative"),
        ("https://other.com/y", "https://other.com/y"),
        ("?page=2", "https://example.com/docs/page"),
        ("https://EXAMPLE.com:443/x/../b?q=1#f", "https://example.com/b"),
        ("http://example.com:80/a/./c/", "http://example.com/a/c/"),
        ("http://example.com:8080/a", "http://example.com:8080/a"),
        ("/a/b/..", "https://example.com/a/"),
        ("/../../up", "https://example.com/up"),
        ("https://example.com", "https://example.com"),
        ("https://user@Example.com/p", "https://user@example.com/p"),
    ],
)
def test_normalize_resolves_and_strips(link, expected):
    assert normalize_url(link, BASE) == expected


@pytest.mark.parametrize(
    "link",
    [
        "",
        None,
        "   ",
        "#section",
        "javascript:void(0)",
        "JavaScript:alert(1)",
        "mailto:me@example.com",
        "tel:+123456",
        "data:text/plain,hello",
        "blob:https://example.com/uuid",
        "ftp://example.com/file",
        "http://[::1",
        "http://example.com:99999/",
    ],
)
def test_normalize_rejects(link):
    assert normalize_url(link, BASE) is None


@pytest.mark.parametrize(
    "link",
    [
        "/a/b/../c",
        "https://example.com/x/../y/./",
        "https://EXAMPLE.COM:443",
        "https://Example.com/Path/",
        "x?y=1",
        "https://example.com",
        "./dot/./seg",
    ],
)
def test_normalize_is_idempotent(link):
    once = normalize_url(link, BASE)
    assert once is not None
    assert normalize_url(once, BASE) == once
    assert normalize_url(once, "https://unrelated.org/") == once


def test_same_domain_is_exact():
    assert is_same_domain("https://example.com/a", "example.com")
    assert is_same_domain("http://EXAMPLE.com:8080/a", "example.com")
    assert not is_same_domain("https://www.example.com/a", "example.com")
    assert not is_same_domain("https://blog.example.com/", "example.com")
    assert not is_same_domain("https://example.com.evil.org/", "example.com")


@pytest.mark.parametrize(
    "url,path",
    [
        ("https://example.com", "/"),
        ("https://example.com/", "/"),
        ("https://example.com/a/", "/a"),
        ("https://example.com/a/b", "/a/b"),
    ],
)
def test_route_path(url, path):
    assert route_path(url) == path


def test_url_key_treats_empty_path_as_root():
    assert url_key("https://example.com") == url_key("https://example.com/")
    assert url_key("https://example.com/a") != url_key("https://example.com/a/")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://example.com", "https://example.com"),
        ("example.com", "https://example.com"),
        ("example.com/start?x=1", "https://example.com/start"),
        ("  http://example.com/  ", "http://example.com/"),
    ],
)
def test_parse_start_url(raw, expected):
    assert parse_start_url(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "not a url", "https://", "http://exa mple.com"])
def test_parse_start_url_rejects(raw):
    assert parse_start_url(raw) is None
