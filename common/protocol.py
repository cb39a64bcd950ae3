"""Wire codec: op codes, little-endian u64 integers and length-prefixed fields.

Wire format (all integers are 8-byte little-endian unsigned):

    uint    [8 bytes]
    string  [uint byte length][UTF-8 bytes]
    bytes   [uint byte length][raw bytes]     length 0 means "absent"

Payloads longer than the channel buffer are moved in buffer-sized pieces so
any length round-trips; every piece is an exact-count read.
"""

import struct
from enum import IntEnum
from typing import Optional

from common.constants import OP_CODE_SIZE, UINT_SIZE
from common.exceptions import ProtocolViolationError
from common.framing import FramedChannel

UINT = struct.Struct('<Q')


class OpCode(IntEnum):
    """Single-byte tag selecting the operation a request carries."""
    UPLOAD = 0
    DOWNLOAD = 1
    LIST_FILES = 2
    KEEP_ALIVE = 3


def write_op_code(channel: FramedChannel, op_code: OpCode) -> None:
    channel.write_and_send(bytes([op_code]))


def read_op_code(channel: FramedChannel) -> OpCode:
    """
    Read one op byte.

    Raises:
        ProtocolViolationError: If the byte is not a known OpCode
        StreamClosedError: If the peer closed the connection
    """
    channel.read_exact(OP_CODE_SIZE)
    op_byte = channel.contents()[0]
    try:
        return OpCode(op_byte)
    except ValueError:
        raise ProtocolViolationError(op_byte) from None


def write_uint(channel: FramedChannel, value: int) -> None:
    channel.write_and_send(UINT.pack(value))


def read_uint(channel: FramedChannel) -> int:
    channel.read_exact(UINT_SIZE)
    return UINT.unpack(channel.contents())[0]


def _send_payload(channel: FramedChannel, payload: bytes) -> None:
    view = memoryview(payload)
    for offset in range(0, len(payload), channel.capacity):
        channel.write_and_send(view[offset:offset + channel.capacity])


def _read_payload(channel: FramedChannel, length: int) -> bytes:
    pieces = []
    remaining = length
    while remaining > 0:
        piece_size = min(channel.capacity, remaining)
        channel.read_exact(piece_size)
        pieces.append(channel.contents())
        remaining -= piece_size
    return b''.join(pieces)


def write_string(channel: FramedChannel, value: str) -> None:
    encoded = value.encode('utf-8')
    write_uint(channel, len(encoded))
    _send_payload(channel, encoded)


def read_string(channel: FramedChannel) -> str:
    """
    Read a length-prefixed UTF-8 string.

    Invalid UTF-8 sequences are replaced rather than rejected.
    """
    length = read_uint(channel)
    if length == 0:
        return ''
    return _read_payload(channel, length).decode('utf-8', errors='replace')


def write_bytes(channel: FramedChannel, value: Optional[bytes]) -> None:
    """Write a length-prefixed blob; None and b'' both encode as absent."""
    if not value:
        write_uint(channel, 0)
        return
    write_uint(channel, len(value))
    _send_payload(channel, value)


def read_bytes(channel: FramedChannel) -> Optional[bytes]:
    """
    Read a length-prefixed blob.

    Returns:
        The bytes, or None when the length prefix is zero
    """
    length = read_uint(channel)
    if length == 0:
        return None
    return _read_payload(channel, length)
