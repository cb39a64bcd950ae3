"""Interactive prompt_toolkit shell over a single server session."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    cached_server_files,
    close_client,
    get_client,
    handle_download,
    handle_fetch,
    handle_list,
    handle_upload,
)
from cli.completer import P2PCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    CommandRequest,
    DownloadCommand,
    FetchCommand,
    ListCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command

HANDLERS = {
    UploadCommand: handle_upload,
    DownloadCommand: handle_download,
    FetchCommand: handle_fetch,
    ListCommand: handle_list,
}


def show_banner() -> None:
    """Clear the terminal and print the logo and welcome lines."""
    os.system("cls" if sys.platform == "win32" else "clear")
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj: CommandRequest) -> str:
    """Run the handler registered for a parsed command."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj)


def run_line(line: str) -> bool:
    """
    Execute one line of input.

    Returns:
        False when the shell should exit
    """
    if line == "exit":
        print("Goodbye!")
        return False
    if line == "help":
        print(HELP_TEXT)
    elif line == "clear":
        show_banner()
    else:
        try:
            print(dispatch_command(parse_command(line)))
        except ParseError as e:
            print(f"Error: {e}")
        except OSError as e:
            print(f"Couldn't connect to server! ({e})")
    return True


def repl_loop() -> None:
    """Connect to the server, then read commands until exit or EOF."""
    try:
        get_client()
    except OSError as e:
        print(f"Couldn't connect to server! ({e})")
        return

    session: PromptSession = PromptSession(
        completer=P2PCompleter(server_files=cached_server_files),
        history=InMemoryHistory(),
        style=STYLE,
    )
    show_banner()

    try:
        while True:
            try:
                line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
            if line and not run_line(line):
                break
    finally:
        close_client()
