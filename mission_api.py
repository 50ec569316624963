"""HTTP handlers for the /configs mission config endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable

from config import CONFIGS_PATH
from envelope import (
    ErrorResult,
    MessageResult,
    RecordListResult,
    RecordResult,
    Result,
    to_http_response,
)
from errors import InvalidRequestError, MissionConfigError, mission_not_found
from mission_store import MissionStore, MissionStoreFullError
from mission_validation import validate_mission_payload
from request import HTTPRequest, RequestBodyError
from response import HTTPResponse
from router import PathParams, Router

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Mission config created successfully"
UPDATED_MESSAGE = "Mission config updated successfully"
DELETED_MESSAGE = "Mission config deleted successfully"

Operation = Callable[[HTTPRequest, PathParams], Result]


class MissionConfigAPI:
    def __init__(self, *, store: MissionStore, base_path: str = CONFIGS_PATH) -> None:
        self._store = store
        self._base_path = base_path.rstrip("/")

    @property
    def store(self) -> MissionStore:
        return self._store

    def register(self, router: Router) -> None:
        item_path = f"{self._base_path}/{{config_id}}"
        router.add_route("GET", self._base_path, self.list_configs)
        router.add_route("POST", self._base_path, self.create_config)
        router.add_route("GET", item_path, self.get_config)
        router.add_route("PUT", item_path, self.update_config)
        router.add_route("DELETE", item_path, self.delete_config)

    def list_configs(self, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        return self._respond(self._list, request, params)

    def get_config(self, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        return self._respond(self._get, request, params)

    def create_config(self, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        return self._respond(self._create, request, params)

    def update_config(self, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        return self._respond(self._update, request, params)

    def delete_config(self, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        return self._respond(self._delete, request, params)

    def _respond(self, operation: Operation, request: HTTPRequest, params: PathParams) -> HTTPResponse:
        try:
            result = operation(request, params)
        except MissionConfigError as exc:
            logger.info("Rejected %s %s: %s", request.method, request.path, exc.message)
            result = ErrorResult.from_error(exc)
        return to_http_response(result)

    def _list(self, _request: HTTPRequest, _params: PathParams) -> Result:
        return RecordListResult(records=tuple(self._store.list()))

    def _get(self, _request: HTTPRequest, params: PathParams) -> Result:
        config_id = _parse_config_id(params["config_id"])
        record = self._store.get(config_id)
        if record is None:
            raise mission_not_found(params["config_id"])
        return RecordResult(record=record)

    def _create(self, request: HTTPRequest, _params: PathParams) -> Result:
        payload = validate_mission_payload(_read_payload(request))
        try:
            config_id = self._store.insert(payload)
        except MissionStoreFullError as exc:
            raise InvalidRequestError("mission config database is full", source="store") from exc
        logger.info("Created mission config id=%s name=%r", config_id, payload.name)
        return MessageResult(message=CREATED_MESSAGE)

    def _update(self, request: HTTPRequest, params: PathParams) -> Result:
        config_id = _parse_config_id(params["config_id"])
        if self._store.get(config_id) is None:
            raise mission_not_found(params["config_id"])

        payload = validate_mission_payload(_read_payload(request))
        if not self._store.replace(config_id, payload):
            raise mission_not_found(params["config_id"])
        logger.info("Updated mission config id=%s", config_id)
        return MessageResult(message=UPDATED_MESSAGE)

    def _delete(self, _request: HTTPRequest, params: PathParams) -> Result:
        config_id = _parse_config_id(params["config_id"])
        if not self._store.delete(config_id):
            raise mission_not_found(params["config_id"])
        logger.info("Deleted mission config id=%s", config_id)
        return MessageResult(message=DELETED_MESSAGE)


def _parse_config_id(raw_id: str) -> int:
    """Map a path segment to a record id; anything but a positive integer is unknown."""
    if not (raw_id.isascii() and raw_id.isdigit()):
        raise mission_not_found(raw_id)
    config_id = int(raw_id)
    if config_id <= 0:
        raise mission_not_found(raw_id)
    return config_id


def _read_payload(request: HTTPRequest) -> dict[str, object]:
    try:
        return request.json()
    except RequestBodyError as exc:
        raise InvalidRequestError("invalid JSON body", source="body") from exc
