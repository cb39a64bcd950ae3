"""Tests for CLI command handlers."""

from unittest.mock import Mock

from cli import commands
from cli.commands import (
    cached_server_files,
    format_file_list,
    handle_download,
    handle_fetch,
    handle_list,
    handle_upload,
)
from cli.models import DownloadCommand, FetchCommand, ListCommand, UploadCommand
from cli.peer_client import PeerClient


def test_handle_upload():
    """Test upload command handler with mocked client."""
    mock_client = Mock(spec=PeerClient)
    mock_client.upload.side_effect = ["a.txt", "b.txt"]

    cmd = UploadCommand(paths=('docs/a.txt', 'b.txt'))
    result = handle_upload(cmd, client=mock_client)

    assert result.count('File uploaded!') == 2
    assert mock_client.upload.call_count == 2
    assert mock_client.upload.call_args_list[0].args == ('docs/a.txt',)


def test_handle_upload_reports_io_error_and_continues():
    """Test that a failed upload does not stop the remaining files."""
    mock_client = Mock(spec=PeerClient)
    mock_client.upload.side_effect = [FileNotFoundError("No such file: 'x.txt'"), "y.txt"]

    cmd = UploadCommand(paths=('x.txt', 'y.txt'))
    result = handle_upload(cmd, client=mock_client)

    assert "Could not send file over network: 'No such file: 'x.txt''" in result
    assert "File uploaded! (y.txt)" in result


def test_handle_download(tmp_path):
    """Test download command handler with mocked client."""
    target = tmp_path / 'report.txt'
    target.write_bytes(b'x' * 17)
    mock_client = Mock(spec=PeerClient)
    mock_client.download_to.return_value = target

    cmd = DownloadCommand(filename='report.txt', output_dir=str(tmp_path))
    result = handle_download(cmd, client=mock_client)

    assert 'File downloaded!' in result
    assert '17 B' in result
    assert mock_client.download_to.call_args.args == ('report.txt', tmp_path)


def test_handle_download_uses_default_dir(tmp_path):
    """Test download falls back to the given default directory."""
    mock_client = Mock(spec=PeerClient)
    mock_client.download_to.return_value = None

    cmd = DownloadCommand(filename='ghost.txt')
    result = handle_download(cmd, client=mock_client, default_dir=tmp_path)

    assert result == 'File not found on server: ghost.txt'
    assert mock_client.download_to.call_args.args == ('ghost.txt', tmp_path)


def test_handle_download_io_error():
    """Test download converts I/O failures to a message."""
    mock_client = Mock(spec=PeerClient)
    mock_client.download_to.side_effect = ConnectionResetError("reset")

    cmd = DownloadCommand(filename='report.txt', output_dir='out')
    result = handle_download(cmd, client=mock_client)

    assert result == "Could not download file: 'reset'"


def test_handle_fetch():
    """Test fetch refreshes from the server."""
    mock_client = Mock(spec=PeerClient)
    mock_client.cached_files = ['b.txt', 'a.txt']

    result = handle_fetch(FetchCommand(), client=mock_client)

    mock_client.list_files.assert_called_once_with()
    assert result == 'Server files (2):\n  a.txt\n  b.txt'


def test_handle_fetch_io_error():
    """Test fetch converts I/O failures to a message."""
    mock_client = Mock(spec=PeerClient)
    mock_client.list_files.side_effect = BrokenPipeError("pipe")

    result = handle_fetch(FetchCommand(), client=mock_client)

    assert result == "Could not fetch files: 'pipe'"


def test_handle_list_uses_cache_only():
    """Test list shows cached names without a request."""
    mock_client = Mock(spec=PeerClient)
    mock_client.cached_files = ['report.txt']

    result = handle_list(ListCommand(), client=mock_client)

    assert 'report.txt' in result
    mock_client.list_files.assert_not_called()


def test_format_empty_file_list():
    assert format_file_list([]) == 'No files on server.'


def test_get_client_replaces_dropped_session(running_server, temp_config, monkeypatch):
    """Test that a client whose connection was dropped is reconnected."""
    host, port = running_server.server_address
    temp_config.set_server_address(host, port)
    dropped = Mock(spec=PeerClient)
    dropped.connected = False
    monkeypatch.setattr(commands, '_config', temp_config)
    monkeypatch.setattr(commands, '_client', dropped)

    try:
        client = commands.get_client()
        assert client is not dropped
        assert client.connected
        assert cached_server_files() == []
        dropped.close.assert_called_once_with()
    finally:
        commands.close_client()


def test_cached_server_files_without_client(monkeypatch):
    monkeypatch.setattr(commands, '_client', None)
    assert cached_server_files() == []
