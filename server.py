"""Mission configuration service entry point and connection lifecycle."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import time

from config import (
    HOST,
    KEEPALIVE_TIMEOUT_SECS,
    LOG_FORMAT,
    MAX_KEEPALIVE_REQUESTS,
    MAX_MISSION_CONFIGS,
    PORT,
    REQUEST_QUEUE_SIZE,
    SOCKET_TIMEOUT_SECS,
    WORKER_COUNT,
)
from envelope import ErrorResult, to_http_response
from errors import page_not_found
from mission_api import MissionConfigAPI
from mission_store import MissionStore
from request import HTTPRequest, HTTPRequestParseError
from response import REASON_PHRASES, HTTPResponse
from router import Router
from socket_handler import (
    HeaderTooLargeError,
    MalformedRequestError,
    PayloadTooLargeError,
    SocketTimeoutError,
    read_http_request_message,
    write_http_response_message,
)
from thread_pool import ThreadPool

logger = logging.getLogger(__name__)

READ_ERROR_STATUS: dict[type[Exception], int] = {
    PayloadTooLargeError: 413,
    HeaderTooLargeError: 431,
    SocketTimeoutError: 408,
    MalformedRequestError: 400,
}


class HTTPServer:
    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        *,
        store: MissionStore | None = None,
        max_configs: int = MAX_MISSION_CONFIGS,
        worker_count: int = WORKER_COUNT,
        request_queue_size: int = REQUEST_QUEUE_SIZE,
        keepalive_timeout_secs: int = KEEPALIVE_TIMEOUT_SECS,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.host = host
        self.port = port
        self.store = store or MissionStore(capacity=max_configs)
        self.worker_count = worker_count
        self.request_queue_size = request_queue_size
        self.keepalive_timeout_secs = keepalive_timeout_secs
        self.log_format = log_format
        self.router = Router()
        MissionConfigAPI(store=self.store).register(self.router)

        self._server_socket: socket.socket | None = None
        self._pool: ThreadPool | None = None
        self._running = False

    def start(self) -> None:
        """Listen and hand accepted clients to the worker pool until stopped."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(128)
            server_socket.settimeout(0.2)
            self.port = server_socket.getsockname()[1]
            self._pool = ThreadPool(
                worker_count=self.worker_count,
                queue_size=self.request_queue_size,
                handler=self._handle_client,
            )
            self._pool.start()
            logger.info(
                "Serving mission configs on http://%s:%s (capacity=%s)",
                self.host,
                self.port,
                self.store.capacity,
            )

            self._running = True
            try:
                while self._running:
                    try:
                        client_socket, address = server_socket.accept()
                    except socket.timeout:
                        continue
                    except OSError:
                        break

                    if self._pool is None or not self._pool.submit(client_socket, address):
                        self._send_queue_full_response(client_socket, address)
            finally:
                if self._pool is not None:
                    self._pool.shutdown()
                    self._pool = None

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None
        if self._pool is not None:
            self._pool.shutdown()
            self._pool = None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Route a parsed request to its handler; unknown paths become page 404s."""
        if request.method == "HEAD":
            return _as_head_response(self.dispatch(_with_method(request, "GET")))

        resolved = self.router.resolve(request.method, request.path)
        if resolved is None:
            return to_http_response(ErrorResult.from_error(page_not_found(request.path)))

        handler, params = resolved
        try:
            return handler(request, params)
        except Exception:
            logger.exception("Unhandled error in route handler")
            return to_http_response(
                ErrorResult(status_code=500, message="internal server error", source="server")
            )

    def _send_queue_full_response(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            started_at = time.perf_counter()
            response = HTTPResponse(
                status_code=503,
                headers={"Connection": "close"},
                body="Service Unavailable",
            )
            try:
                bytes_sent = write_http_response_message(client_socket, response)
            except OSError:
                return
            self._log_request(address, "-", "-", response, 0, bytes_sent, started_at, False)

    def _send_transport_error(
        self,
        client_socket: socket.socket,
        address: tuple[str, int],
        status_code: int,
        *,
        bytes_in: int,
        started_at: float,
    ) -> None:
        response = HTTPResponse(
            status_code=status_code,
            headers={"Connection": "close"},
            body=REASON_PHRASES.get(status_code, "Bad Request"),
        )
        try:
            bytes_sent = write_http_response_message(client_socket, response)
        except OSError:
            return
        self._log_request(address, "-", "-", response, bytes_in, bytes_sent, started_at, False)

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            client_socket.settimeout(min(SOCKET_TIMEOUT_SECS, self.keepalive_timeout_secs))
            request_count = 0
            carry = b""
            while request_count < MAX_KEEPALIVE_REQUESTS:
                started_at = time.perf_counter()
                try:
                    raw_request, carry = read_http_request_message(client_socket, carry)
                except (PayloadTooLargeError, HeaderTooLargeError, SocketTimeoutError, MalformedRequestError) as exc:
                    logger.debug("Read error from %s: %s", address[0], exc)
                    self._send_transport_error(
                        client_socket,
                        address,
                        READ_ERROR_STATUS[type(exc)],
                        bytes_in=0,
                        started_at=started_at,
                    )
                    return
                except OSError:
                    return

                if not raw_request:
                    return

                try:
                    request = HTTPRequest.from_bytes(raw_request)
                except HTTPRequestParseError as exc:
                    self._send_transport_error(
                        client_socket,
                        address,
                        exc.status_code,
                        bytes_in=len(raw_request),
                        started_at=started_at,
                    )
                    return

                request_count += 1
                response = self.dispatch(request)
                should_close = not request.keep_alive or request_count >= MAX_KEEPALIVE_REQUESTS
                if should_close:
                    response.headers.setdefault("Connection", "close")
                else:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive",
                        f"timeout={self.keepalive_timeout_secs}, max={MAX_KEEPALIVE_REQUESTS - request_count}",
                    )

                try:
                    bytes_sent = write_http_response_message(client_socket, response)
                except OSError:
                    return

                self._log_request(
                    address,
                    request.method,
                    request.path,
                    response,
                    len(raw_request),
                    bytes_sent,
                    started_at,
                    request_count > 1,
                )
                if should_close:
                    return

    def _log_request(
        self,
        address: tuple[str, int],
        method: str,
        path: str,
        response: HTTPResponse,
        bytes_in: int,
        bytes_out: int,
        started_at: float,
        connection_reused: bool,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": method,
            "path": path,
            "status": response.status_code,
            "bytes_in": bytes_in,
            "bytes_out": bytes_out,
            "latency_ms": round(duration_ms, 3),
            "connection_reused": connection_reused,
        }
        if self.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            "client=%s method=%s path=%s status=%s bytes_in=%s bytes_out=%s duration_ms=%.2f connection_reused=%s",
            event["client"],
            event["method"],
            event["path"],
            event["status"],
            event["bytes_in"],
            event["bytes_out"],
            duration_ms,
            event["connection_reused"],
        )


def _with_method(request: HTTPRequest, method: str) -> HTTPRequest:
    return HTTPRequest(
        method=method,
        path=request.path,
        http_version=request.http_version,
        headers=dict(request.headers),
        body=request.body,
        keep_alive=request.keep_alive,
    )


def _as_head_response(get_response: HTTPResponse) -> HTTPResponse:
    return HTTPResponse(
        status_code=get_response.status_code,
        headers=dict(get_response.headers),
        body=b"",
        content_length_override=len(get_response.body),
    )


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the satellite mission configuration service")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--max-configs", type=int, default=MAX_MISSION_CONFIGS)
    parser.add_argument("--workers", type=int, default=WORKER_COUNT)
    parser.add_argument("--queue-size", type=int, default=REQUEST_QUEUE_SIZE)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    logging.basicConfig(level=logging.INFO)
    server = HTTPServer(
        host=args.host,
        port=args.port,
        max_configs=args.max_configs,
        worker_count=args.workers,
        request_queue_size=args.queue_size,
        log_format=args.log_format,
    )
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
