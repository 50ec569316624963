"""Tagged results of /configs operations and their ``{meta, data, errors}`` envelope."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from errors import MissionConfigError
from mission_store import SatelliteConfig
from response import HTTPResponse


@dataclass(frozen=True, slots=True)
class RecordResult:
    record: SatelliteConfig


@dataclass(frozen=True, slots=True)
class RecordListResult:
    records: tuple[SatelliteConfig, ...]


@dataclass(frozen=True, slots=True)
class MessageResult:
    message: str


@dataclass(frozen=True, slots=True)
class ErrorResult:
    status_code: int
    message: str
    source: str

    @classmethod
    def from_error(cls, error: MissionConfigError) -> "ErrorResult":
        return cls(status_code=error.status_code, message=error.message, source=error.source)


Result = RecordResult | RecordListResult | MessageResult | ErrorResult


def to_envelope(result: Result) -> dict[str, Any]:
    if isinstance(result, ErrorResult):
        return {
            "meta": None,
            "data": None,
            "errors": [{"message": result.message, "source": result.source}],
        }

    data: Any
    if isinstance(result, RecordResult):
        data = result.record.to_dict()
    elif isinstance(result, RecordListResult):
        data = [record.to_dict() for record in result.records]
    elif isinstance(result, MessageResult):
        data = {"message": result.message}
    else:
        raise TypeError(f"Unsupported result type: {type(result).__name__}")
    return {"meta": None, "data": data, "errors": None}


def to_http_response(result: Result) -> HTTPResponse:
    status_code = result.status_code if isinstance(result, ErrorResult) else 200
    return HTTPResponse.json(status_code, to_envelope(result))
