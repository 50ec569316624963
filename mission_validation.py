"""Validation of mission config payloads sent to POST/PUT /configs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from errors import InvalidRequestError

COSPAR_ID_PATTERN = re.compile(r"^\d{4}-\d{3}[A-Z]{2}$", re.ASCII)


class SatelliteType(str, Enum):
    OPTICAL = "OPTICAL"
    SAR = "SAR"


SATELLITE_TYPES = frozenset(item.value for item in SatelliteType)


@dataclass(frozen=True, slots=True)
class MissionPayload:
    """Validated client-supplied fields of a mission config."""

    name: str
    type: SatelliteType
    cospar_id: str


def is_valid_cospar_id(value: object) -> bool:
    # fullmatch so a trailing newline cannot slip past "$".
    return isinstance(value, str) and COSPAR_ID_PATTERN.fullmatch(value) is not None


def validate_mission_payload(payload: dict[str, Any]) -> MissionPayload:
    """Return the validated payload or raise for the first rule it breaks.

    Rules are checked in a fixed order: required name, type and cospar_id,
    then the type enumeration, then the COSPAR ID format. Unknown keys are
    ignored.
    """
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequestError("name is required", source="name")

    satellite_type = payload.get("type")
    if _is_missing(satellite_type):
        raise InvalidRequestError("payload type is required", source="type")

    cospar_id = payload.get("cospar_id")
    if _is_missing(cospar_id):
        raise InvalidRequestError("cospar ID is required", source="cospar_id")

    if not isinstance(satellite_type, str) or satellite_type not in SATELLITE_TYPES:
        raise InvalidRequestError("invalid payload type", source="type")

    if not is_valid_cospar_id(cospar_id):
        raise InvalidRequestError("invalid COSPAR ID", source="cospar_id")

    return MissionPayload(name=name, type=SatelliteType(satellite_type), cospar_id=cospar_id)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()
