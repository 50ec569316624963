"""Routing table for method/path handlers with ``{name}`` path parameters."""

from __future__ import annotations

from collections.abc import Callable

from request import HTTPRequest
from response import HTTPResponse

PathParams = dict[str, str]
Handler = Callable[[HTTPRequest, PathParams], HTTPResponse]


class Router:
    def __init__(self) -> None:
        self._routes: list[tuple[str, tuple[str, ...], Handler]] = []

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        normalized_method = method.upper().strip()
        if not normalized_method:
            raise ValueError("method cannot be empty")
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._routes.append((normalized_method, _split(path), handler))

    def resolve(self, method: str, path: str) -> tuple[Handler, PathParams] | None:
        normalized_method = method.upper().strip()
        segments = _split(path)
        for route_method, pattern, handler in self._routes:
            if route_method != normalized_method:
                continue
            params = _match(pattern, segments)
            if params is not None:
                return handler, params
        return None


def _split(path: str) -> tuple[str, ...]:
    # "/configs/" keeps its empty trailing segment so it never matches "/configs".
    return tuple(path.split("/")[1:])


def _match(pattern: tuple[str, ...], segments: tuple[str, ...]) -> PathParams | None:
    if len(pattern) != len(segments):
        return None
    params: PathParams = {}
    for expected, actual in zip(pattern, segments):
        if expected.startswith("{") and expected.endswith("}"):
            if not actual:
                return None
            params[expected[1:-1]] = actual
        elif expected != actual:
            return None
    return params
