"""Configuration constants for the mission configuration service."""

HOST: str = "127.0.0.1"
PORT: int = 1234
SERVER_NAME: str = "mission-config-service/1.0"

CONFIGS_PATH: str = "/configs"
# Upper bound on stored mission configs; overridable with --max-configs.
MAX_MISSION_CONFIGS: int = 6

BUFFER_SIZE: int = 1024
READ_CHUNK_SIZE: int = 8192
SOCKET_TIMEOUT_SECS: int = 5
KEEPALIVE_TIMEOUT_SECS: int = 5
MAX_KEEPALIVE_REQUESTS: int = 100
MAX_REQUEST_BYTES: int = 1_048_576
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 65_536
MAX_TARGET_LENGTH: int = 2048

WORKER_COUNT: int = 8
REQUEST_QUEUE_SIZE: int = 64
LOG_FORMAT: str = "plain"
