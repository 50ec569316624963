#!/usr/bin/env python3
"""HTTP client helpers and CLI for a running mission configuration service."""
# ruff: noqa: E402

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import CONFIGS_PATH, PORT

DEFAULT_BASE_URL = f"http://localhost:{PORT}"


@dataclass(slots=True)
class ClientResult:
    """Status code, decoded envelope and its ``data`` member for one call."""

    status: int
    body: dict[str, Any]

    @property
    def data(self) -> Any:
        return self.body.get("data")

    @property
    def errors(self) -> list[dict[str, Any]] | None:
        return self.body.get("errors")

    @property
    def error_message(self) -> str | None:
        errors = self.errors
        if not errors:
            return None
        return errors[0].get("message")


class ConfigsClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        configs_path: str = CONFIGS_PATH,
        timeout_secs: float = 5.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.configs_path = configs_path.rstrip("/")
        self.timeout_secs = timeout_secs
        # Talk to the service directly even when proxy variables are set.
        self._opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))

    def request(self, method: str, path: str, payload: Any = None) -> ClientResult:
        data = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = urllib.request.Request(
            url=f"{self.base_url}{path}",
            method=method,
            headers=headers,
            data=data,
        )
        try:
            with self._opener.open(req, timeout=self.timeout_secs) as resp:
                return ClientResult(status=int(resp.status), body=_decode(resp.read()))
        except urllib.error.HTTPError as exc:
            return ClientResult(status=int(exc.code), body=_decode(exc.read()))

    def list_configs(self) -> ClientResult:
        return self.request("GET", self.configs_path)

    def list_config_ids(self) -> list[int]:
        data = self.list_configs().data
        if not isinstance(data, list):
            return []
        return [item["id"] for item in data]

    def get_config(self, config_id: int | str) -> ClientResult:
        return self.request("GET", f"{self.configs_path}/{config_id}")

    def create_config(self, payload: dict[str, Any]) -> ClientResult:
        return self.request("POST", self.configs_path, payload)

    def create_configs(self, payloads: Iterable[dict[str, Any]]) -> list[ClientResult]:
        return [self.create_config(payload) for payload in payloads]

    def update_config(self, config_id: int | str, payload: dict[str, Any]) -> ClientResult:
        return self.request("PUT", f"{self.configs_path}/{config_id}", payload)

    def delete_config(self, config_id: int | str) -> ClientResult:
        return self.request("DELETE", f"{self.configs_path}/{config_id}")

    def delete_all_configs(self) -> ClientResult:
        """Delete every stored config and return the listing taken afterwards."""
        for config_id in self.list_config_ids():
            self.delete_config(config_id)
        return self.list_configs()


def _decode(raw: bytes) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Talk to a mission configuration service")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list")
    subparsers.add_parser("purge")

    get_parser = subparsers.add_parser("get")
    get_parser.add_argument("config_id")

    create_parser = subparsers.add_parser("create")
    create_parser.add_argument("payload", help="JSON object with name, type and cospar_id")

    update_parser = subparsers.add_parser("update")
    update_parser.add_argument("config_id")
    update_parser.add_argument("payload", help="JSON object with name, type and cospar_id")

    delete_parser = subparsers.add_parser("delete")
    delete_parser.add_argument("config_id")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    client = ConfigsClient(args.base_url)

    if args.command == "list":
        result = client.list_configs()
    elif args.command == "purge":
        result = client.delete_all_configs()
    elif args.command == "get":
        result = client.get_config(args.config_id)
    elif args.command == "create":
        result = client.create_config(json.loads(args.payload))
    elif args.command == "update":
        result = client.update_config(args.config_id, json.loads(args.payload))
    else:
        result = client.delete_config(args.config_id)

    print(json.dumps({"status": result.status, "body": result.body}, indent=2, sort_keys=True))
    return 0 if result.status < 400 else 1


if __name__ == "__main__":
    raise SystemExit(main())
