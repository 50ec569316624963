"""Socket-level integration tests for the mission configuration service."""

from __future__ import annotations

import json
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from config import MAX_BODY_BYTES
from server import HTTPServer


def _start_server(**kwargs: object) -> tuple[HTTPServer, threading.Thread]:
    server = HTTPServer(port=0, **kwargs)
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()

    deadline = time.time() + 3
    while server.port == 0 and time.time() < deadline:
        time.sleep(0.01)

    if server.port == 0:
        raise RuntimeError("Server did not bind to a port")

    return server, thread


def _stop_server(server: HTTPServer, thread: threading.Thread) -> None:
    server.stop()
    thread.join(timeout=2.0)


def _recv_http_response(sock: socket.socket) -> bytes:
    buffer = bytearray()
    while b"\r\n\r\n" not in buffer:
        chunk = sock.recv(4096)
        if not chunk:
            return bytes(buffer)
        buffer.extend(chunk)

    head, body = bytes(buffer).split(b"\r\n\r\n", 1)
    content_length = 0
    for line in head.split(b"\r\n")[1:]:
        name, value = line.split(b":", 1)
        if name.strip().lower() == b"content-length":
            content_length = int(value.strip())
    while len(body) < content_length:
        chunk = sock.recv(4096)
        if not chunk:
            break
        body += chunk
    return head + b"\r\n\r\n" + body


def _send_raw(host: str, port: int, payload: bytes) -> bytes:
    with socket.create_connection((host, port), timeout=2.0) as client:
        client.sendall(payload)
        return _recv_http_response(client)


def _json_request(method: str, path: str, payload: object = None, *, connection: str = "close") -> bytes:
    body = b"" if payload is None else json.dumps(payload).encode("utf-8")
    return (
        f"{method} {path} HTTP/1.1\r\n"
        "Host: localhost\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        f"Connection: {connection}\r\n"
        "\r\n"
    ).encode("ascii") + body


def _body(raw_response: bytes) -> dict[str, object]:
    _head, body = raw_response.split(b"\r\n\r\n", 1)
    return json.loads(body.decode("utf-8"))


def test_create_and_list_over_socket() -> None:
    server, thread = _start_server()
    try:
        payload = {"name": "Test Satellites 322", "type": "OPTICAL", "cospar_id": "2023-001AB"}
        created = _send_raw(server.host, server.port, _json_request("POST", "/configs", payload))
        listed = _send_raw(server.host, server.port, _json_request("GET", "/configs"))
    finally:
        _stop_server(server, thread)

    assert created.startswith(b"HTTP/1.1 200 OK")
    assert b"Content-Type: application/json\r\n" in created
    assert _body(created)["data"] == {"message": "Mission config created successfully"}
    assert _body(listed) == {"meta": None, "data": [dict(payload, id=1)], "errors": None}


def test_keep_alive_serves_multiple_requests_on_one_connection() -> None:
    server, thread = _start_server()
    try:
        with socket.create_connection((server.host, server.port), timeout=2.0) as client:
            client.sendall(_json_request("GET", "/configs", connection="keep-alive"))
            first = _recv_http_response(client)
            client.sendall(_json_request("GET", "/configss", connection="close"))
            second = _recv_http_response(client)
    finally:
        _stop_server(server, thread)

    assert first.startswith(b"HTTP/1.1 200 OK")
    assert b"Connection: keep-alive\r\n" in first
    assert second.startswith(b"HTTP/1.1 404 Not Found")
    assert _body(second)["errors"][0]["message"] == "'resource '/configss' of type 'page'' does not exist"


def test_concurrent_creates_respect_capacity() -> None:
    server, thread = _start_server(max_configs=6)
    try:
        payloads = [
            {"name": f"Satellite Config {index}", "type": "SAR", "cospar_id": f"2000-{100 + index}AA"}
            for index in range(1, 13)
        ]
        with ThreadPoolExecutor(max_workers=12) as executor:
            futures = [
                executor.submit(_send_raw, server.host, server.port, _json_request("POST", "/configs", payload))
                for payload in payloads
            ]
            responses = [future.result() for future in futures]
        listed = _body(_send_raw(server.host, server.port, _json_request("GET", "/configs")))
    finally:
        _stop_server(server, thread)

    assert sum(response.startswith(b"HTTP/1.1 200 OK") for response in responses) == 6
    assert sum(response.startswith(b"HTTP/1.1 400 Bad Request") for response in responses) == 6
    assert sorted(item["id"] for item in listed["data"]) == [1, 2, 3, 4, 5, 6]


def test_malformed_request_returns_400() -> None:
    server, thread = _start_server()
    try:
        response = _send_raw(server.host, server.port, b"BROKEN\r\n\r\n")
    finally:
        _stop_server(server, thread)

    assert response.startswith(b"HTTP/1.1 400 Bad Request")


def test_oversized_body_returns_413() -> None:
    server, thread = _start_server()
    try:
        payload = (
            b"POST /configs HTTP/1.1\r\n"
            b"Host: localhost\r\n"
            + f"Content-Length: {MAX_BODY_BYTES + 1}\r\n".encode("ascii")
            + b"\r\n"
        )
        response = _send_raw(server.host, server.port, payload)
    finally:
        _stop_server(server, thread)

    assert response.startswith(b"HTTP/1.1 413 Payload Too Large")


def test_json_access_log_line(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO", logger="server")
    server, thread = _start_server(log_format="json")
    try:
        _send_raw(server.host, server.port, _json_request("GET", "/configs/7"))
        deadline = time.time() + 2
        while '"status": 404' not in caplog.text and time.time() < deadline:
            time.sleep(0.01)
    finally:
        _stop_server(server, thread)

    events = [json.loads(record.getMessage()) for record in caplog.records if record.getMessage().startswith("{")]
    assert any(event["path"] == "/configs/7" and event["status"] == 404 for event in events)
