"""HTTP response model and serializer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import Any

from config import SERVER_NAME

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    408: "Request Timeout",
    413: "Payload Too Large",
    414: "URI Too Long",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
    505: "HTTP Version Not Supported",
}


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    content_length_override: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")

    @classmethod
    def json(cls, status_code: int, payload: Any) -> "HTTPResponse":
        return cls(
            status_code=status_code,
            headers={"Content-Type": "application/json"},
            body=json.dumps(payload),
        )

    @property
    def reason_phrase(self) -> str:
        return REASON_PHRASES.get(self.status_code, "Unknown")

    def head_bytes(self) -> bytes:
        headers = dict(self.headers)
        headers.setdefault("Date", formatdate(timeval=None, localtime=False, usegmt=True))
        headers.setdefault("Server", SERVER_NAME)
        headers.setdefault("Content-Type", "text/plain; charset=utf-8")
        content_length = self.content_length_override
        if content_length is None:
            content_length = len(self.body)
        headers["Content-Length"] = str(content_length)

        lines = [f"HTTP/1.1 {self.status_code} {self.reason_phrase}"]
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        return "\r\n".join(lines).encode("iso-8859-1") + b"\r\n\r\n"

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.1 wire format bytes."""
        return self.head_bytes() + bytes(self.body)
