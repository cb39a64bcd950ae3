"""Entry point for the file server.
Indexes the server directory, then accepts clients until interrupted.
"""

import os
import signal
import sys

from pydantic import ValidationError

from common.logging_config import setup_logging
from fileserver.config import load_server_config
from fileserver.file_index import SharedFileIndex
from fileserver.file_storage import FileStorage
from fileserver.tcp_server import FileServer


def main() -> None:
    """Bootstrap file server."""
    log_level = 'DEBUG' if '--debug' in sys.argv else os.getenv('LOG_LEVEL', 'INFO')
    logger = setup_logging('fileserver', log_level=log_level)

    try:
        config = load_server_config()
    except ValidationError as e:
        logger.error(f"Invalid server configuration: {e}")
        sys.exit(1)

    logger.info("Initializing file server...")

    storage = FileStorage(config.files_dir)
    storage.ensure_directory()
    file_index = SharedFileIndex.from_storage(storage)

    server = FileServer(config, file_index, storage)
    try:
        server.bind()
    except OSError as e:
        logger.error(f"Could not start server: {e}")
        sys.exit(1)

    logger.info(
        f"Serving {config.files_dir} with {config.worker_count} workers "
        f"({config.buffer_size}-byte buffers)"
    )

    def request_shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        server.shutdown(wait=False)

    if sys.platform != 'win32':
        signal.signal(signal.SIGTERM, request_shutdown)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        # serve_forever has already drained the pool.
        pass
    finally:
        logger.info("File server shutdown complete")


if __name__ == "__main__":
    main()
