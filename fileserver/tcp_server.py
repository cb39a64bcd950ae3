"""TCP acceptor handing each connection to the worker pool."""

import functools
import socket
import threading
from typing import Optional, Tuple

from common.constants import ACCEPT_POLL_SECONDS, LISTEN_BACKLOG
from common.exceptions import PoolClosedError
from common.logging_config import get_logger
from fileserver.config import ServerConfig
from fileserver.file_index import SharedFileIndex
from fileserver.file_storage import FileStorage
from fileserver.session import handle_connection
from fileserver.worker_pool import WorkerPool

logger = get_logger(__name__)


class FileServer:
    """
    Listens for clients and serves each on a pool worker.

    The file index is created by the caller and injected, so every session
    shares the same instance.
    """

    def __init__(
        self,
        config: ServerConfig,
        file_index: SharedFileIndex,
        storage: FileStorage,
    ):
        """
        Initialize server.

        Args:
            config: Validated server configuration
            file_index: Index shared by all connection handlers
            storage: Server file directory
        """
        self.config = config
        self.file_index = file_index
        self.storage = storage
        self.pool: Optional[WorkerPool] = None
        self._listener: Optional[socket.socket] = None
        self._stopping = threading.Event()
        self._serving = threading.Event()
        self._stopped = threading.Event()

    @property
    def server_address(self) -> Tuple[str, int]:
        """Address actually bound (useful when port 0 was requested)."""
        if self._listener is None:
            raise RuntimeError("Server is not bound")
        return self._listener.getsockname()[:2]

    def bind(self) -> None:
        """Create the worker pool and start listening."""
        self.pool = WorkerPool.build(self.config.worker_count)

        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            listener.bind((self.config.host, self.config.port))
            listener.listen(LISTEN_BACKLOG)
            listener.settimeout(ACCEPT_POLL_SECONDS)
        except OSError:
            listener.close()
            self.pool.shutdown()
            raise
        self._listener = listener

        host, port = self.server_address
        logger.info(f"Listening for connections on {host}:{port}")

    def serve_forever(self) -> None:
        """
        Accept connections until shutdown() is called.

        Stops the pool on exit; returns only after every worker has finished.
        """
        if self._listener is None:
            self.bind()

        self._serving.set()
        try:
            while not self._stopping.is_set():
                try:
                    conn, address = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._stopping.is_set():
                        break
                    logger.error(f"Connection failed: {e}")
                    continue

                job = functools.partial(
                    handle_connection,
                    conn,
                    address,
                    self.file_index,
                    self.storage,
                    self.config.buffer_size,
                )
                try:
                    self.pool.submit(job)
                except PoolClosedError:
                    conn.close()
                    break
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
            raise
        finally:
            self._close_listener()
            logger.info("Stopped accepting, waiting for open connections...")
            self.pool.shutdown()
            self._stopped.set()
            logger.info("Server stopped")

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting connections.

        Args:
            wait: Block until serve_forever has drained the pool and returned
        """
        self._stopping.set()
        self._close_listener()
        if not self._serving.is_set():
            if self.pool is not None:
                self.pool.shutdown()
            return
        if wait:
            self._stopped.wait()

    def _close_listener(self) -> None:
        listener = self._listener
        if listener is None:
            return
        try:
            listener.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Not connected; close() below still releases the port.
            pass
        listener.close()
