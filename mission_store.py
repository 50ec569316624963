"""Bounded in-memory store for satellite mission configs."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from mission_validation import MissionPayload, SatelliteType

logger = logging.getLogger(__name__)


class MissionStoreFullError(ValueError):
    """Raised when inserting into a store already holding ``capacity`` records."""


@dataclass(frozen=True, slots=True)
class SatelliteConfig:
    id: int
    name: str
    type: SatelliteType
    cospar_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "cospar_id": self.cospar_id,
        }


class MissionStore:
    """Authoritative id -> SatelliteConfig mapping for one service instance.

    Ids start at 1 and grow by one per insert; deleted ids are never handed
    out again until :meth:`reset`. All operations take the same lock and
    return immutable records, so readers never see a half-applied write.
    """

    def __init__(self, *, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._lock = threading.Lock()
        self._records: dict[int, SatelliteConfig] = {}
        self._next_id = 1

    @property
    def capacity(self) -> int:
        return self._capacity

    def list(self) -> list[SatelliteConfig]:
        with self._lock:
            return list(self._records.values())

    def get(self, config_id: int) -> SatelliteConfig | None:
        with self._lock:
            return self._records.get(config_id)

    def insert(self, payload: MissionPayload) -> int:
        with self._lock:
            if len(self._records) >= self._capacity:
                raise MissionStoreFullError("mission_store_full")
            config_id = self._next_id
            self._next_id += 1
            self._records[config_id] = _build(config_id, payload)
        logger.debug("Inserted mission config id=%s", config_id)
        return config_id

    def replace(self, config_id: int, payload: MissionPayload) -> bool:
        with self._lock:
            if config_id not in self._records:
                return False
            # Assigning to an existing key keeps creation order intact.
            self._records[config_id] = _build(config_id, payload)
        logger.debug("Replaced mission config id=%s", config_id)
        return True

    def delete(self, config_id: int) -> bool:
        with self._lock:
            if self._records.pop(config_id, None) is None:
                return False
        logger.debug("Deleted mission config id=%s", config_id)
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._next_id = 1
        logger.debug("Mission store reset")


def _build(config_id: int, payload: MissionPayload) -> SatelliteConfig:
    return SatelliteConfig(
        id=config_id,
        name=payload.name,
        type=payload.type,
        cospar_id=payload.cospar_id,
    )
