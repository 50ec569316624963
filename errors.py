"""Errors raised by the /configs API and rendered into the response envelope."""

from __future__ import annotations


class MissionConfigError(Exception):
    """Base error carrying the HTTP status code and envelope error fields."""

    status_code = 500

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.message = message
        self.source = source


class InvalidRequestError(MissionConfigError):
    """Malformed, missing or out-of-range input, or a full store."""

    status_code = 400

    def __init__(self, reason: str, *, source: str) -> None:
        super().__init__(f"invalid request due to {reason}", source=source)
        self.reason = reason


class ResourceNotFoundError(MissionConfigError):
    """Referenced mission id or page path does not exist."""

    status_code = 404

    def __init__(self, resource: str, kind: str, *, source: str) -> None:
        super().__init__(f"'resource '{resource}' of type '{kind}'' does not exist", source=source)
        self.resource = resource
        self.kind = kind


def mission_not_found(mission_id: object) -> ResourceNotFoundError:
    return ResourceNotFoundError(str(mission_id), "Mission", source="mission")


def page_not_found(path: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(path, "page", source="router")
