"""Move file contents across a FramedChannel in buffer-sized pieces.

Envelope: ``[uint size][size raw bytes]``. A size of 0 means there is no
file, so an empty file and a missing file look the same to the receiver.
"""

import os
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from common.framing import FramedChannel
from common.logging_config import get_logger
from common.protocol import write_uint

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


def send_file(
    channel: FramedChannel,
    path: Union[str, Path],
    progress: Optional[ProgressCallback] = None,
) -> int:
    """
    Stream a file to the peer.

    Args:
        channel: Channel to write to
        path: File to send; a missing file is sent as the zero-size sentinel
        progress: Optional callback invoked as progress(sent, total) per piece

    Returns:
        Number of payload bytes sent

    Raises:
        OSError: If the file cannot be read or the stream write fails
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"{path} does not exist, sending absent sentinel")
        write_uint(channel, 0)
        return 0

    with open(path, 'rb') as source:
        return send_open_file(channel, source, progress)


def send_open_file(
    channel: FramedChannel,
    source: BinaryIO,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """
    Stream an already-open file from its current size.

    Opening first lets a caller fail on an unreadable file before any
    request bytes reach the wire.

    Returns:
        Number of payload bytes sent

    Raises:
        OSError: If the file shrinks, cannot be read, or the stream write fails
    """
    file_size = os.fstat(source.fileno()).st_size
    write_uint(channel, file_size)

    channel.reset()

    while channel.bytes_sent < file_size:
        bytes_to_read = min(channel.capacity, file_size - channel.bytes_sent)
        bytes_read = channel.load_from(source, bytes_to_read)
        if bytes_read == 0:
            raise OSError(
                f"{getattr(source, 'name', 'file')} shrank while sending: "
                f"{channel.bytes_sent} of {file_size} bytes sent"
            )
        channel.send(bytes_read)
        if progress:
            progress(channel.bytes_sent, file_size)

    return file_size


def receive_file(
    channel: FramedChannel,
    declared_size: int,
    progress: Optional[ProgressCallback] = None,
) -> Optional[bytes]:
    """
    Receive ``declared_size`` bytes of file content.

    Args:
        channel: Channel to read from
        declared_size: Size announced by the sender
        progress: Optional callback invoked as progress(received, total) per piece

    Returns:
        The assembled bytes, or None when declared_size is 0

    Raises:
        StreamClosedError: If the peer closes mid-transfer
        OSError: If the stream read fails
    """
    if declared_size == 0:
        return None

    contents = bytearray()
    bytes_received = 0

    channel.reset()

    while bytes_received < declared_size:
        bytes_to_read = min(channel.capacity, declared_size - bytes_received)
        bytes_read = channel.read_up_to(bytes_to_read)
        contents += channel.contents()
        bytes_received += bytes_read
        if progress:
            progress(bytes_received, declared_size)

    return bytes(contents)
