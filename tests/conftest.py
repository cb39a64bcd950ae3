"""Shared pytest fixtures for all tests."""

import socket
import threading

import pytest

from cli.config import Config
from cli.peer_client import PeerClient
from fileserver.config import ServerConfig
from fileserver.file_index import SharedFileIndex
from fileserver.file_storage import FileStorage
from fileserver.tcp_server import FileServer

SMALL_BUFFER = 16


@pytest.fixture
def socket_pair():
    """
    Connected loopback sockets.

    Returns:
        (left, right) socket tuple, closed after the test
    """
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


@pytest.fixture
def server_dir(tmp_path):
    """
    Create an empty server file directory.

    Returns:
        Path to the directory
    """
    directory = tmp_path / 'server_files'
    directory.mkdir()
    return directory


@pytest.fixture
def storage(server_dir):
    """FileStorage rooted at the temporary server directory."""
    return FileStorage(server_dir)


@pytest.fixture
def file_index():
    """Empty SharedFileIndex."""
    return SharedFileIndex()


@pytest.fixture
def running_server(storage, file_index):
    """
    Start a FileServer on an ephemeral loopback port.

    Returns:
        The serving FileServer; shut down (and joined) after the test
    """
    config = ServerConfig(
        host='127.0.0.1',
        port=0,
        files_dir=storage.root,
        worker_count=4,
        buffer_size=SMALL_BUFFER,
    )
    server = FileServer(config, file_index, storage)
    server.bind()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown(wait=True)
    thread.join(timeout=5)


@pytest.fixture
def connect(running_server):
    """
    Factory for clients connected to running_server.

    Every client is closed before the server shuts down.
    """
    clients = []

    def _connect() -> PeerClient:
        host, port = running_server.server_address
        client = PeerClient(host, port, timeout=5, buffer_size=SMALL_BUFFER)
        client.connect()
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        client.close()


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .p2pshare directory
    """
    config_dir = tmp_path / '.p2pshare'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'report.txt'
    file_path.write_bytes(b'quarterly numbers')
    return file_path
