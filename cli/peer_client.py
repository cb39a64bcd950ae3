"""Client side of the wire protocol over one long-lived TCP connection."""

import socket
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from common.constants import DEFAULT_BUFFER_SIZE, DEFAULT_CONNECT_TIMEOUT_SECONDS
from common.framing import FramedChannel
from common.logging_config import get_logger
from common.protocol import OpCode, read_string, read_uint, write_op_code, write_string
from common.streaming import ProgressCallback, receive_file, send_open_file
from common.utils import sanitize_file_name
from cli.config import Config

logger = get_logger(__name__)


class PeerClient:
    """
    Upload, download and list files on a p2pshare server.

    Requests are strictly sequential: a lock serializes every exchange, so
    the keep-alive thread and the caller never interleave on the socket.
    Every method lets OSError propagate to the caller; a failure partway
    through an exchange also closes the connection.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_SECONDS,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        """
        Initialize client; no connection is made until connect().

        Args:
            host: Server host name or address
            port: Server port
            timeout: Connect timeout in seconds
            buffer_size: Channel buffer capacity in bytes
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.cached_files: List[str] = []
        self.sock: Optional[socket.socket] = None
        self.channel: Optional[FramedChannel] = None
        self._lock = threading.RLock()
        self._last_activity = time.monotonic()
        self._keep_alive: Optional['KeepAliveTimer'] = None

    @classmethod
    def from_config(cls, config: Config) -> 'PeerClient':
        host, port = config.get_server_address()
        return cls(host, port, timeout=config.get_timeout())

    @property
    def connected(self) -> bool:
        return self.sock is not None

    def connect(self) -> None:
        """
        Open the session connection.

        Raises:
            OSError: If the server cannot be reached
        """
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        sock.settimeout(None)
        self.sock = sock
        self.channel = FramedChannel(sock, self.buffer_size)
        self._touch()
        logger.info(f"Connected to {self.host}:{self.port}")

    def close(self) -> None:
        """Stop keep-alives and shut the connection down in both directions."""
        self.stop_keep_alive()
        sock = self.sock
        if sock is None:
            return
        # Shutdown first so a request blocked in another thread wakes up.
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            logger.debug(f"Socket already closed: {e}")
        with self._lock:
            if self.sock is None:
                return
            self.sock.close()
            self.sock = None
            self.channel = None
        logger.info("Disconnected")

    def __enter__(self) -> 'PeerClient':
        if not self.connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _require_channel(self) -> FramedChannel:
        if self.channel is None:
            raise ConnectionError("Not connected to a server")
        self.channel.reset()
        return self.channel

    @contextmanager
    def _request(self) -> Iterator[FramedChannel]:
        """
        Hold the session for one request/response exchange.

        Once a request byte may be on the wire, any OSError leaves the server
        mid-request, so the connection is dropped; later calls then raise
        ConnectionError instead of blocking on a desynchronized stream.
        """
        with self._lock:
            channel = self._require_channel()
            try:
                yield channel
            except OSError as e:
                self._drop_connection(e)
                raise
            finally:
                self._touch()

    def _drop_connection(self, error: OSError) -> None:
        logger.error(f"Connection to {self.host}:{self.port} lost mid-request: {error}")
        if self._keep_alive is not None:
            self._keep_alive.stop(wait=False)
            self._keep_alive = None
        with self._lock:
            if self.sock is None:
                return
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug(f"Socket already closed: {e}")
            self.sock.close()
            self.sock = None
            self.channel = None

    def _touch(self) -> None:
        self._last_activity = time.monotonic()

    def idle_seconds(self) -> float:
        """Seconds since the last byte was exchanged with the server."""
        return time.monotonic() - self._last_activity

    def upload(
        self,
        path: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload a local file.

        The path is sent as given; the server keeps only its base name.
        The file is opened before anything is sent, so an unreadable file
        leaves the session usable.

        Args:
            path: Local file to upload
            progress: Optional callback invoked as progress(sent, total)

        Returns:
            Base name the file is stored under on the server

        Raises:
            FileNotFoundError: If path is not an existing regular file
            OSError: If the file cannot be opened or the transfer fails
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"No such file: '{path}'")
        file_name = sanitize_file_name(str(path))

        with open(path, 'rb') as source:
            with self._request() as channel:
                logger.info(f"Uploading {path}")
                write_op_code(channel, OpCode.UPLOAD)
                write_string(channel, str(path))
                size = send_open_file(channel, source, progress)

        if size > 0 and file_name not in self.cached_files:
            self.cached_files.append(file_name)
        logger.info(f"File sent successfully: {file_name} ({size} bytes)")
        return file_name

    def download(
        self,
        file_name: str,
        progress: Optional[ProgressCallback] = None,
    ) -> Optional[bytes]:
        """
        Fetch a file's contents.

        Returns:
            File bytes, or None if the server does not have the file
        """
        with self._request() as channel:
            logger.info(f"Downloading {file_name}")
            write_op_code(channel, OpCode.DOWNLOAD)
            write_string(channel, file_name)
            size = read_uint(channel)
            return receive_file(channel, size, progress)

    def download_to(
        self,
        file_name: str,
        directory: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
    ) -> Optional[Path]:
        """
        Fetch a file and write it into a local directory.

        Returns:
            Path written, or None if the server does not have the file
        """
        contents = self.download(file_name, progress)
        if contents is None:
            logger.info(f"Server does not have {file_name}")
            return None

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / sanitize_file_name(file_name)
        target.write_bytes(contents)
        logger.info(f"Saved {file_name} to {target}")
        return target

    def list_files(self) -> List[str]:
        """
        Fetch every file name the server has indexed and refresh the cache.

        Order is whatever the server's set yields; do not rely on it.
        """
        with self._request() as channel:
            write_op_code(channel, OpCode.LIST_FILES)
            count = read_uint(channel)
            files = [read_string(channel) for _ in range(count)]

        self.cached_files = list(files)
        logger.debug(f"Server lists {len(files)} file(s)")
        return files

    def keep_alive(self) -> None:
        """Tell the server the session is still in use; no reply is expected."""
        with self._request() as channel:
            write_op_code(channel, OpCode.KEEP_ALIVE)

    def start_keep_alive(self, interval: float) -> None:
        """Send keep-alives from a background thread whenever idle for interval seconds."""
        if self._keep_alive is not None:
            return
        self._keep_alive = KeepAliveTimer(self, interval)
        self._keep_alive.start()

    def stop_keep_alive(self) -> None:
        if self._keep_alive is not None:
            self._keep_alive.stop()
            self._keep_alive = None


class KeepAliveTimer:
    """Daemon thread issuing keep-alives on an idle PeerClient."""

    def __init__(self, client: PeerClient, interval: float):
        """
        Initialize timer.

        Args:
            client: Connected client to keep alive
            interval: Idle seconds before a keep-alive is sent
        """
        if interval <= 0:
            raise ValueError("Keep-alive interval must be positive")
        self.client = client
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="KeepAlive",
        )
        self._thread.start()
        logger.debug(f"Keep-alive thread started (every {self.interval}s idle)")

    def stop(self, wait: bool = True) -> None:
        self._stop_event.set()
        if wait and self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=5.0)

    def _run(self) -> None:
        while not self._stop_event.wait(timeout=self._next_wait()):
            if self.client.idle_seconds() < self.interval:
                continue
            try:
                self.client.keep_alive()
                logger.debug("Keep-alive sent")
            except OSError as e:
                logger.warning(f"Keep-alive failed, stopping timer: {e}")
                return

    def _next_wait(self) -> float:
        return max(self.interval - self.client.idle_seconds(), 0.01)
