"""Request operations decoded from the wire, one per dispatch iteration."""

from dataclasses import dataclass
from typing import Optional, Union

from common.protocol import OpCode


@dataclass(frozen=True)
class UploadOperation:
    """
    Client pushes a file; ``payload`` is None when the declared size was 0.
    """
    file_name: str
    size: int
    payload: Optional[bytes]
    op_code: OpCode = OpCode.UPLOAD


@dataclass(frozen=True)
class DownloadOperation:
    """Client asks for a file by name."""
    file_name: str
    op_code: OpCode = OpCode.DOWNLOAD


@dataclass(frozen=True)
class ListFilesOperation:
    """Client asks for every name in the server's file index."""
    op_code: OpCode = OpCode.LIST_FILES


@dataclass(frozen=True)
class KeepAliveOperation:
    """No payload and no response."""
    op_code: OpCode = OpCode.KEEP_ALIVE


Operation = Union[
    UploadOperation,
    DownloadOperation,
    ListFilesOperation,
    KeepAliveOperation,
]
