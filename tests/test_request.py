"""Unit tests for HTTP request parsing."""

import pytest

from request import HTTPRequest, HTTPRequestParseError, RequestBodyError


def test_parse_get_strips_query_string_from_path() -> None:
    raw = (
        b"GET /configs?page=1&page=2 HTTP/1.1\r\n"
        b"Host: localhost:1234\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )

    request = HTTPRequest.from_bytes(raw)

    assert request.method == "GET"
    assert request.path == "/configs"
    assert request.http_version == "HTTP/1.1"
    assert request.headers["host"] == "localhost:1234"
    assert request.body == b""
    assert request.keep_alive is True
    assert not hasattr(request, "query_params")


def test_parse_post_with_json_body() -> None:
    body = b'{"name": "Sat", "type": "SAR", "cospar_id": "2023-001AB"}'
    raw = (
        b"POST /configs HTTP/1.1\r\n"
        b"Host: localhost\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode("ascii")
        + b"Connection: close\r\n"
        b"\r\n"
        + body
    )

    request = HTTPRequest.from_bytes(raw)

    assert request.method == "POST"
    assert request.keep_alive is False
    assert request.json() == {"name": "Sat", "type": "SAR", "cospar_id": "2023-001AB"}


def test_parse_lowercase_method_is_normalized() -> None:
    request = HTTPRequest.from_bytes(b"delete /configs/1 HTTP/1.1\r\nHost: localhost\r\n\r\n")

    assert request.method == "DELETE"
    assert request.path == "/configs/1"


def test_parse_invalid_request_line_raises_value_error() -> None:
    raw = b"BROKEN-LINE\r\nHost: localhost\r\n\r\n"

    with pytest.raises(ValueError, match="Invalid request line"):
        HTTPRequest.from_bytes(raw)


def test_parse_invalid_content_length_raises_value_error() -> None:
    raw = (
        b"POST /configs HTTP/1.1\r\n"
        b"Host: localhost\r\n"
        b"Content-Length: abc\r\n"
        b"\r\n"
        b"{}"
    )

    with pytest.raises(ValueError, match="Invalid Content-Length"):
        HTTPRequest.from_bytes(raw)


def test_parse_missing_host_header_is_rejected() -> None:
    with pytest.raises(HTTPRequestParseError, match="Host header required"):
        HTTPRequest.from_bytes(b"GET /configs HTTP/1.1\r\n\r\n")


@pytest.mark.parametrize(
    ("raw", "status_code"),
    [
        (b"BREW /configs HTTP/1.1\r\nHost: localhost\r\n\r\n", 501),
        (b"GET /configs HTTP/2.0\r\nHost: localhost\r\n\r\n", 505),
        (b"GET /" + b"a" * 3000 + b" HTTP/1.1\r\nHost: localhost\r\n\r\n", 414),
    ],
)
def test_parse_errors_carry_status_code(raw: bytes, status_code: int) -> None:
    with pytest.raises(HTTPRequestParseError) as exc_info:
        HTTPRequest.from_bytes(raw)

    assert exc_info.value.status_code == status_code


def test_json_of_empty_body_is_empty_object() -> None:
    request = HTTPRequest(method="POST", path="/configs", body=b"")

    assert request.json() == {}


@pytest.mark.parametrize("body", [b"{not-json", b"[1, 2]", b"\xff\xfe", b'"text"', pytest.param(b'{"a":' * 30000 + b"1" + b"}" * 30000, id="deeply-nested")])
def test_json_rejects_non_object_bodies(body: bytes) -> None:
    request = HTTPRequest(method="POST", path="/configs", body=body)

    with pytest.raises(RequestBodyError):
        request.json()
