"""Utility functions for CLI operations."""

import sys
from typing import TextIO

from common.utils import format_file_size
from cli.constants import GREEN, RESET


class TransferProgress:
    """Progress callback that redraws one stdout line per transferred piece."""

    def __init__(self, verb: str, filename: str, stream: TextIO = sys.stdout):
        """
        Initialize the progress display.

        Args:
            verb: Leading word, e.g. "Uploading" or "Downloading"
            filename: Display name for the file
            stream: Output stream (stdout by default)
        """
        self.verb = verb
        self.filename = filename
        self.stream = stream
        self._finished = False

    def __call__(self, done: int, total: int) -> None:
        """
        Display current transfer progress.

        Args:
            done: Bytes transferred so far
            total: Bytes expected in total
        """
        progress = (done / total) * 100 if total else 100.0
        self.stream.write(
            f"\r{self.verb} {self.filename}: {format_file_size(done)} / "
            f"{format_file_size(total)} ({GREEN}{progress:.1f}%{RESET})"
        )
        self.stream.flush()
        if done >= total:
            self.finish()

    def finish(self) -> None:
        """Finalize progress display with newline."""
        if self._finished:
            return
        self._finished = True
        self.stream.write('\n')
        self.stream.flush()
