"""Tests for the per-connection request dispatcher."""

import logging
import struct
import threading

import pytest

from common.framing import FramedChannel
from common.protocol import (
    OpCode,
    read_string,
    read_uint,
    write_op_code,
    write_string,
    write_uint,
)
from common.streaming import receive_file
from common.types import (
    DownloadOperation,
    KeepAliveOperation,
    ListFilesOperation,
    UploadOperation,
)
from fileserver.session import ClientSession, read_operation

CAPACITY = 16


@pytest.fixture
def session(socket_pair, file_index, storage):
    """
    Run a ClientSession on one end of a socket pair.

    Returns:
        (client channel, session, thread running the session)
    """
    client_sock, server_sock = socket_pair
    session = ClientSession(server_sock, ("127.0.0.1", 5555), file_index, storage, CAPACITY)
    thread = threading.Thread(target=session.run, daemon=True)
    thread.start()
    yield FramedChannel(client_sock, CAPACITY), session, thread
    client_sock.close()
    thread.join(timeout=5)


def upload(channel, name, data):
    write_op_code(channel, OpCode.UPLOAD)
    write_string(channel, name)
    write_uint(channel, len(data))
    for offset in range(0, len(data), CAPACITY):
        channel.write_and_send(data[offset:offset + CAPACITY])


def list_files(channel):
    write_op_code(channel, OpCode.LIST_FILES)
    return [read_string(channel) for _ in range(read_uint(channel))]


class TestReadOperation:

    def test_decodes_upload_with_payload(self, socket_pair):
        left, right = socket_pair
        upload(FramedChannel(left, CAPACITY), "a/b.txt", b"payload bytes here")

        operation = read_operation(FramedChannel(right, CAPACITY))

        assert operation == UploadOperation(file_name="a/b.txt", size=18, payload=b"payload bytes here")

    def test_decodes_zero_size_upload_as_absent_payload(self, socket_pair):
        left, right = socket_pair
        upload(FramedChannel(left, CAPACITY), "empty.txt", b"")

        operation = read_operation(FramedChannel(right, CAPACITY))

        assert operation.payload is None

    def test_decodes_download_list_and_keep_alive(self, socket_pair):
        left, right = socket_pair
        writer = FramedChannel(left, CAPACITY)
        reader = FramedChannel(right, CAPACITY)
        write_op_code(writer, OpCode.DOWNLOAD)
        write_string(writer, "x.txt")
        write_op_code(writer, OpCode.LIST_FILES)
        write_op_code(writer, OpCode.KEEP_ALIVE)

        assert read_operation(reader) == DownloadOperation(file_name="x.txt")
        assert read_operation(reader) == ListFilesOperation()
        assert read_operation(reader) == KeepAliveOperation()


class TestClientSession:

    def test_upload_writes_file_and_indexes_base_name(self, session, server_dir, file_index):
        channel, _, _ = session

        upload(channel, "/tmp/elsewhere/report.txt", b"quarterly numbers")

        assert list_files(channel) == ["report.txt"]
        assert (server_dir / "report.txt").read_bytes() == b"quarterly numbers"
        assert file_index.snapshot() == {"report.txt"}

    def test_zero_size_upload_stores_nothing(self, session, server_dir):
        channel, _, _ = session

        upload(channel, "empty.txt", b"")

        assert list_files(channel) == []
        assert not (server_dir / "empty.txt").exists()

    def test_upload_without_base_name_is_discarded(self, session, server_dir):
        channel, _, _ = session

        upload(channel, "..", b"sneaky")

        assert list_files(channel) == []
        assert list(server_dir.iterdir()) == []

    def test_download_streams_file(self, session, server_dir):
        channel, _, _ = session
        data = bytes(range(200))
        (server_dir / "blob.bin").write_bytes(data)

        write_op_code(channel, OpCode.DOWNLOAD)
        write_string(channel, "blob.bin")
        size = read_uint(channel)

        assert size == 200
        assert receive_file(channel, size) == data

    def test_download_missing_file_sends_sentinel(self, session):
        channel, _, _ = session

        write_op_code(channel, OpCode.DOWNLOAD)
        write_string(channel, "nope.txt")

        assert read_uint(channel) == 0

    def test_download_reads_disk_not_index(self, session, server_dir, file_index):
        channel, _, _ = session
        (server_dir / "outside.txt").write_bytes(b"added behind the server's back")

        write_op_code(channel, OpCode.DOWNLOAD)
        write_string(channel, "outside.txt")

        assert read_uint(channel) == 30
        assert "outside.txt" not in file_index

    def test_keep_alive_has_no_response(self, session):
        channel, _, _ = session

        write_op_code(channel, OpCode.KEEP_ALIVE)
        write_op_code(channel, OpCode.KEEP_ALIVE)

        assert list_files(channel) == []

    def test_unknown_op_byte_terminates_connection(self, session, caplog):
        channel, _, thread = session

        with caplog.at_level(logging.ERROR, logger="fileserver.session"):
            channel.write_and_send(bytes([9]))
            thread.join(timeout=5)

        assert not thread.is_alive()
        assert "Protocol violation" in caplog.text

    def test_client_close_ends_session_quietly(self, session, socket_pair, caplog):
        _, _, thread = session
        client_sock, _ = socket_pair

        with caplog.at_level(logging.INFO, logger="fileserver.session"):
            client_sock.close()
            thread.join(timeout=5)

        assert not thread.is_alive()
        assert "Client disconnected" in caplog.text

    def test_close_mid_request_is_logged_as_error(self, session, socket_pair, caplog):
        channel, _, thread = session
        client_sock, _ = socket_pair

        with caplog.at_level(logging.ERROR, logger="fileserver.session"):
            write_op_code(channel, OpCode.UPLOAD)
            client_sock.sendall(struct.pack('<Q', 10) + b"abc")
            client_sock.close()
            thread.join(timeout=5)

        assert not thread.is_alive()
        assert "mid-request" in caplog.text
