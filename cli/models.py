"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional, Union


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files."""

    paths: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by name."""

    filename: str
    output_dir: Optional[str] = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class FetchCommand:
    """Refresh the cached server file list."""

    command: Literal["fetch"] = "fetch"


@dataclass(frozen=True)
class ListCommand:
    """Show the cached server file list."""

    command: Literal["list"] = "list"


CommandRequest = Union[
    UploadCommand,
    DownloadCommand,
    FetchCommand,
    ListCommand,
]
