"""Custom completer for the p2pshare CLI with path and server-file completion."""

from pathlib import Path
from typing import Callable, Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS


class P2PCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for 'upload' arguments
    - Cached server file names for the first 'download' argument
    """

    def __init__(self, server_files: Callable[[], List[str]] = list):
        """
        Args:
            server_files: Returns the cached server file names on demand
        """
        self.server_files = server_files

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]

        if command == "upload":
            yield from self._complete_local_paths(current_word)
        elif command == "download":
            argument_index = len(tokens) - 1 if not is_typing_new_token else len(tokens)
            if argument_index == 1:
                yield from self._complete_server_files(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_local_paths(self, partial: str) -> Iterable[Completion]:
        """Complete files and directories relative to the working directory."""
        if partial.endswith("/"):
            directory, prefix = Path(partial), ""
        else:
            directory, prefix = Path(partial).parent, Path(partial).name

        if not directory.is_dir():
            return

        for item in sorted(directory.iterdir()):
            if not item.name.startswith(prefix):
                continue
            candidate = str(item) + ("/" if item.is_dir() else "")
            if directory == Path("."):
                candidate = item.name + ("/" if item.is_dir() else "")
            yield Completion(candidate, start_position=-len(partial))

    def _complete_server_files(self, partial: str) -> Iterable[Completion]:
        """Complete names from the last fetched server file list."""
        for name in sorted(self.server_files()):
            if name.startswith(partial):
                yield Completion(name, start_position=-len(partial))
