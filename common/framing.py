"""Fixed-capacity buffer wrapped around a borrowed byte stream."""

import socket
from typing import BinaryIO

from common.constants import DEFAULT_BUFFER_SIZE
from common.exceptions import StreamClosedError


class FramedChannel:
    """
    Exact-count reads and writes over a socket through one reusable buffer.

    The channel borrows the socket: it never closes it. ``bytes_sent`` counts
    bytes flushed since the last ``reset()`` and ``last_insert_len`` records
    how many buffer bytes the most recent read or write left valid.

    Not safe for concurrent use; one thread owns a channel at a time.
    """

    def __init__(self, stream: socket.socket, capacity: int = DEFAULT_BUFFER_SIZE):
        """
        Initialize channel over a connected stream.

        Args:
            stream: Connected socket (or anything with recv_into/sendall)
            capacity: Buffer size in bytes
        """
        if capacity < 1:
            raise ValueError("Buffer capacity must be at least 1 byte")
        self._stream = stream
        self._buffer = bytearray(capacity)
        self._view = memoryview(self._buffer)
        self._bytes_sent = 0
        self._last_insert_len = 0

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def bytes_sent(self) -> int:
        return self._bytes_sent

    @property
    def last_insert_len(self) -> int:
        return self._last_insert_len

    def reset(self) -> None:
        """Zero the send counters between independent transfers."""
        self._bytes_sent = 0
        self._last_insert_len = 0

    def contents(self) -> bytes:
        """Return a copy of the valid part of the buffer."""
        return bytes(self._view[:self._last_insert_len])

    def write_to_buffer(self, data: bytes) -> int:
        """
        Copy data into the buffer, truncating at capacity.

        Returns:
            Number of bytes copied
        """
        count = min(len(data), self.capacity)
        self._view[:count] = data[:count]
        self._last_insert_len = count
        return count

    def send(self, count: int) -> None:
        """
        Flush the first ``count`` buffer bytes to the stream.

        Raises:
            OSError: If the underlying write fails
        """
        self._stream.sendall(self._view[:count])
        self._bytes_sent += count

    def send_last_write(self) -> None:
        """Flush exactly the bytes placed by the most recent buffer insert."""
        self.send(self._last_insert_len)

    def write_and_send(self, data: bytes) -> None:
        """Copy up to capacity bytes into the buffer and flush them."""
        self.write_to_buffer(data)
        self.send_last_write()

    def load_from(self, source: BinaryIO, count: int) -> int:
        """
        Fill the buffer with up to ``count`` bytes read from a file object.

        Returns:
            Number of bytes actually read (0 at end of file)
        """
        count = min(count, self.capacity)
        read = source.readinto(self._view[:count]) or 0
        self._last_insert_len = read
        return read

    def read_exact(self, count: int) -> None:
        """
        Block until exactly ``count`` bytes are in the buffer.

        Raises:
            ValueError: If count exceeds the buffer capacity
            StreamClosedError: If the peer closes before count bytes arrive
            OSError: If the underlying read fails
        """
        if count > self.capacity:
            raise ValueError(
                f"Cannot read {count} bytes into a {self.capacity}-byte buffer"
            )
        received = 0
        while received < count:
            read = self._stream.recv_into(self._view[received:count])
            if read == 0:
                raise StreamClosedError(count, received)
            received += read
        self._last_insert_len = count

    def read_up_to(self, count: int) -> int:
        """
        Perform a single read of at most ``count`` bytes.

        Short reads are normal; callers loop until their total is reached.

        Returns:
            Number of bytes read, always at least 1

        Raises:
            StreamClosedError: If the peer has closed the stream
            OSError: If the underlying read fails
        """
        count = min(count, self.capacity)
        read = self._stream.recv_into(self._view[:count])
        if read == 0 and count > 0:
            raise StreamClosedError(count, 0)
        self._last_insert_len = read
        return read
