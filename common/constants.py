"""Project-wide constants (buffer sizes, default ports, op codes)."""

DEFAULT_BUFFER_SIZE: int = 1024  # bytes held by a FramedChannel
UINT_SIZE: int = 8  # every length prefix and integer is a little-endian u64
OP_CODE_SIZE: int = 1

DEFAULT_SERVER_HOST: str = "0.0.0.0"
DEFAULT_CLIENT_HOST: str = "127.0.0.1"
DEFAULT_SERVER_PORT: int = 8000
DEFAULT_SERVER_FILES_DIR: str = "server_files"
DEFAULT_WORKER_COUNT: int = 8

DEFAULT_KEEP_ALIVE_INTERVAL_SECONDS: float = 5.0
DEFAULT_CONNECT_TIMEOUT_SECONDS: float = 30.0

LISTEN_BACKLOG: int = 128
ACCEPT_POLL_SECONDS: float = 0.5  # how often the acceptor checks for shutdown
