"""Per-connection request loop: read an op code, decode its request, handle it."""

import socket
from typing import Tuple

from common.constants import DEFAULT_BUFFER_SIZE
from common.exceptions import (
    InvalidFileNameError,
    ProtocolViolationError,
    StreamClosedError,
)
from common.framing import FramedChannel
from common.logging_config import connection_logger, get_logger
from common.protocol import OpCode, read_op_code, read_string, read_uint, write_string, write_uint
from common.streaming import receive_file, send_file
from common.types import (
    DownloadOperation,
    KeepAliveOperation,
    ListFilesOperation,
    Operation,
    UploadOperation,
)
from fileserver.file_index import SharedFileIndex
from fileserver.file_storage import FileStorage

logger = get_logger(__name__)


def read_operation(channel: FramedChannel) -> Operation:
    """
    Decode one complete request, upload payload included.

    Raises:
        ProtocolViolationError: On an unknown op byte
        StreamClosedError: If the peer closes mid-request
    """
    return read_request(channel, read_op_code(channel))


def read_request(channel: FramedChannel, op_code: OpCode) -> Operation:
    """Decode the payload that follows an already-read op code."""
    if op_code == OpCode.UPLOAD:
        file_name = read_string(channel)
        size = read_uint(channel)
        payload = receive_file(channel, size)
        return UploadOperation(file_name=file_name, size=size, payload=payload)
    if op_code == OpCode.DOWNLOAD:
        return DownloadOperation(file_name=read_string(channel))
    if op_code == OpCode.LIST_FILES:
        return ListFilesOperation()
    return KeepAliveOperation()


class ClientSession:
    """
    Serves one client connection until it closes or fails.

    The session owns the socket and closes it when ``run`` returns.
    """

    def __init__(
        self,
        sock: socket.socket,
        address: Tuple[str, int],
        file_index: SharedFileIndex,
        storage: FileStorage,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        self.sock = sock
        self.address = address
        self.file_index = file_index
        self.storage = storage
        self.channel = FramedChannel(sock, buffer_size)
        self.awaiting_op_code = True
        self.log = connection_logger(logger, address)

    def run(self) -> None:
        """Dispatch requests until disconnect, I/O error or protocol violation."""
        self.log.info("Client connected")
        try:
            while True:
                self.serve_one()
        except StreamClosedError as e:
            if self.awaiting_op_code:
                self.log.info("Client disconnected")
            else:
                self.log.error(f"Client error mid-request: {e}")
        except ProtocolViolationError as e:
            self.log.error(f"Protocol violation, dropping connection: {e}")
        except OSError as e:
            self.log.error(f"Client error: {e}")
        finally:
            self.close()

    def serve_one(self) -> None:
        """Run one full AwaitOpCode -> handler -> AwaitOpCode iteration."""
        self.channel.reset()
        self.awaiting_op_code = True
        op_code = read_op_code(self.channel)
        self.awaiting_op_code = False
        operation = read_request(self.channel, op_code)

        if isinstance(operation, UploadOperation):
            self.handle_upload(operation)
        elif isinstance(operation, DownloadOperation):
            self.handle_download(operation)
        elif isinstance(operation, ListFilesOperation):
            self.handle_list_files()
        else:
            self.log.debug("Keep-alive")

    def handle_upload(self, operation: UploadOperation) -> None:
        self.log.info(f"Receiving file: \"{operation.file_name}\" ({operation.size} bytes)")

        if operation.payload is None:
            self.log.info("Empty upload, nothing stored")
            return

        try:
            stored_name = self.storage.write_file(operation.file_name, operation.payload)
        except InvalidFileNameError as e:
            self.log.warning(f"Discarding upload: {e}")
            return

        self.file_index.insert(stored_name)
        self.log.info(f"File received successfully: \"{stored_name}\"")

    def handle_download(self, operation: DownloadOperation) -> None:
        path = self.storage.find_file(operation.file_name)
        if path is None:
            self.log.info(f"Requested file not found: \"{operation.file_name}\"")
            write_uint(self.channel, 0)
            return

        self.log.info(f"Sending file: \"{path.name}\"")
        sent = send_file(self.channel, path)
        self.log.info(f"File sent successfully: \"{path.name}\" ({sent} bytes)")

    def handle_list_files(self) -> None:
        names = self.file_index.snapshot()
        write_uint(self.channel, len(names))
        for name in names:
            write_string(self.channel, name)
        self.log.debug(f"Listed {len(names)} file(s)")

    def close(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already disconnected by the peer.
            pass
        self.sock.close()


def handle_connection(
    sock: socket.socket,
    address: Tuple[str, int],
    file_index: SharedFileIndex,
    storage: FileStorage,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> None:
    """Worker job body: serve one accepted connection to completion."""
    ClientSession(sock, address, file_index, storage, buffer_size).run()
