"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.utils import format_file_size
from cli.config import Config
from cli.models import DownloadCommand, FetchCommand, ListCommand, UploadCommand
from cli.peer_client import PeerClient
from cli.utils import TransferProgress

logger = get_logger(__name__)


_config: Optional[Config] = None
_client: Optional[PeerClient] = None


def get_config() -> Config:
    """Get or load the global client Config."""
    global _config
    if _config is None:
        _config = Config(Path.home() / '.p2pshare' / 'config.json')
    return _config


def get_client() -> PeerClient:
    """
    Get or create the global connected PeerClient instance.

    The first call connects, starts keep-alives and fetches the file list.
    A client whose connection was dropped is replaced by a fresh one.

    Returns:
        PeerClient instance

    Raises:
        OSError: If the server cannot be reached
    """
    global _client
    if _client is not None and not _client.connected:
        logger.info("Previous session was lost, reconnecting")
        _client.close()
        _client = None
    if _client is None:
        config = get_config()
        logger.debug("Creating new PeerClient instance")
        client = PeerClient.from_config(config)
        client.connect()
        client.list_files()
        client.start_keep_alive(config.get_keep_alive_interval())
        _client = client
    return _client


def cached_server_files() -> list[str]:
    """File names from the current client's last listing, without a request."""
    if _client is None:
        return []
    return _client.cached_files


def close_client() -> None:
    """Close the global client if one was opened."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def handle_upload(cmd: UploadCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with local paths
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        One result line per file
    """
    logger.info(f"Executing upload command: {len(cmd.paths)} file(s)")
    if client is None:
        client = get_client()

    lines = []
    for path in cmd.paths:
        try:
            name = client.upload(path, progress=TransferProgress("Uploading", path))
        except OSError as e:
            lines.append(f"Could not send file over network: '{e}'")
            continue
        lines.append(f"File uploaded! ({name})")
    return "\n".join(lines)


def handle_download(
    cmd: DownloadCommand,
    client: Optional[PeerClient] = None,
    default_dir: Optional[Path] = None,
) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with filename and optional output_dir
        client: Optional PeerClient for dependency injection (testing)
        default_dir: Directory used when the command names none

    Returns:
        Success or error message
    """
    logger.info(f"Executing download command: filename={cmd.filename} output_dir={cmd.output_dir}")
    if client is None:
        client = get_client()
    if cmd.output_dir is not None:
        directory = Path(cmd.output_dir)
    elif default_dir is not None:
        directory = default_dir
    else:
        directory = get_config().get_download_dir()

    try:
        target = client.download_to(
            cmd.filename,
            directory,
            progress=TransferProgress("Downloading", cmd.filename),
        )
    except OSError as e:
        return f"Could not download file: '{e}'"

    if target is None:
        return f"File not found on server: {cmd.filename}"
    return f"File downloaded! ({target}, {format_file_size(target.stat().st_size)})"


def handle_fetch(cmd: FetchCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'fetch' command.

    Args:
        cmd: FetchCommand
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        Formatted list of server files
    """
    if client is None:
        client = get_client()
    try:
        client.list_files()
    except OSError as e:
        return f"Could not fetch files: '{e}'"
    return format_file_list(client.cached_files)


def handle_list(cmd: ListCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'list' command without contacting the server.

    Args:
        cmd: ListCommand
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        Formatted list of cached server files
    """
    if client is None:
        client = get_client()
    return format_file_list(client.cached_files)


def format_file_list(files: list[str]) -> str:
    """Render server file names, sorted for display."""
    if not files:
        return "No files on server."
    lines = [f"Server files ({len(files)}):"]
    lines.extend(f"  {name}" for name in sorted(files))
    return "\n".join(lines)
