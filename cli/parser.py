"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DownloadCommand,
    FetchCommand,
    ListCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Download/Fetch/List)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "fetch":
        return _parse_no_args(tokens[1:], FetchCommand)
    elif command_name == "list":
        return _parse_no_args(tokens[1:], ListCommand)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [path...]' command."""
    if not args:
        raise ParseError("upload requires at least one file path")

    return UploadCommand(paths=tuple(args))


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <name> [output_dir]' command."""
    if not args:
        raise ParseError("download requires at least 1 argument: <name> [output_dir]")
    if len(args) > 2:
        raise ParseError("download takes at most 2 arguments: <name> [output_dir]")

    filename = args[0]
    output_dir = args[1] if len(args) > 1 else None

    return DownloadCommand(filename=filename, output_dir=output_dir)


def _parse_no_args(args: list[str], command_type):
    """Parse a command that takes no arguments."""
    if args:
        raise ParseError(f"{command_type.command} takes no arguments")
    return command_type()
