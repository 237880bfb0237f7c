from __future__ import annotations

import pytest

from courier import DefaultHeaders, InvalidArgumentError, parse_headers
from courier.clients.headers import (
    DEFAULT_ACCEPT,
    DEFAULT_CONTENT_TYPE,
    is_same_origin,
    resolve_header_values,
    strip_content_type,
)


def test_common_defaults_apply_to_every_method() -> None:
    headers: dict[str, str] = {}
    DefaultHeaders().set_headers(headers, "get")
    assert headers == {"Accept": DEFAULT_ACCEPT}


def test_body_methods_get_content_type() -> None:
    for method in ("POST", "PUT", "PATCH"):
        headers: dict[str, str] = {}
        DefaultHeaders().set_headers(headers, method)
        assert headers["Content-Type"] == DEFAULT_CONTENT_TYPE


def test_caller_header_is_never_overwritten_case_insensitively() -> None:
    headers = {"accept": "x"}
    DefaultHeaders().set_headers(headers, "GET")
    assert headers == {"accept": "x"}


def test_missing_header_map_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        DefaultHeaders().set_headers(None, "GET")


def test_default_groups_are_configurable() -> None:
    defaults = DefaultHeaders({"delete": {"X-Confirm": "yes"}})
    defaults["common"]["X-Client"] = "courier"

    headers: dict[str, str] = {}
    defaults.set_headers(headers, "DELETE")
    assert headers["X-Client"] == "courier"
    assert headers["X-Confirm"] == "yes"
    assert "delete" in defaults


def test_resolve_header_values_calls_resolvers_and_drops_none() -> None:
    headers = {"X-Static": "a", "X-Token": lambda: "t", "X-Drop": lambda: None}
    resolve_header_values(headers)
    assert headers == {"X-Static": "a", "X-Token": "t"}


def test_strip_content_type() -> None:
    headers = {"content-type": "text/plain", "Accept": "*/*"}
    strip_content_type(headers)
    assert headers == {"Accept": "*/*"}


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("/api/items", True),
        ("api/items", True),
        ("https://app.example/api", True),
        ("https://app.example:8443/api", True),
        ("http://app.example/api", False),
        ("https://evil.example/api", False),
        ("//evil.example/api", False),
    ],
)
def test_is_same_origin(url: str, expected: bool) -> None:
    assert is_same_origin(url, ("https", "app.example")) is expected


def test_parse_headers_lowercases_trims_and_joins_duplicates() -> None:
    raw = "Content-Type: text/html\nSet-Cookie: a=1\r\nset-cookie:  b=2 \nbroken line\n: empty\n"
    assert parse_headers(raw) == {
        "content-type": "text/html",
        "set-cookie": "a=1, b=2",
    }


def test_parse_headers_keeps_colons_in_values() -> None:
    assert parse_headers("Location: https://x.example:8080/a") == {
        "location": "https://x.example:8080/a"
    }


def test_parse_headers_of_nothing_is_empty() -> None:
    assert parse_headers(None) == {}
    assert parse_headers("") == {}
