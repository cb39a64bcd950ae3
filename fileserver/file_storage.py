"""Manages the server's file directory: name sanitizing, reads and writes."""

from pathlib import Path
from typing import List, Optional, Union

from common.exceptions import InvalidFileNameError
from common.utils import sanitize_file_name


class FileStorage:
    """
    The directory the server serves files from.

    Every name passed in is sanitized, so callers cannot reach outside root.
    """

    def __init__(self, root: Union[str, Path]):
        """
        Initialize storage rooted at a directory.

        Args:
            root: Server file directory (created by ensure_directory)
        """
        self.root = Path(root)

    def ensure_directory(self) -> None:
        """Ensure the server directory exists."""
        self.root.mkdir(parents=True, exist_ok=True)

    def get_file_path(self, file_name: str) -> Path:
        """
        Get path for a file inside the server directory.

        Raises:
            InvalidFileNameError: If the name has no base name
        """
        return self.root / sanitize_file_name(file_name)

    def find_file(self, file_name: str) -> Optional[Path]:
        """
        Resolve a requested name to an existing regular file.

        Returns:
            Path to the file, or None if it is missing or the name is unusable
        """
        try:
            path = self.get_file_path(file_name)
        except InvalidFileNameError:
            return None
        if path.is_file():
            return path
        return None

    def write_file(self, file_name: str, data: bytes) -> str:
        """
        Write file contents, replacing any existing file of the same name.

        Args:
            file_name: Client-supplied name; directories are stripped
            data: File contents

        Returns:
            The bare name the file was stored under

        Raises:
            InvalidFileNameError: If the name has no base name
            OSError: If the write fails
        """
        path = self.get_file_path(file_name)
        path.write_bytes(data)
        return path.name

    def list_file_names(self) -> List[str]:
        """
        List every entry name in the server directory.

        Returns:
            Entry names, empty if the directory does not exist
        """
        if not self.root.exists():
            return []
        return [entry.name for entry in self.root.iterdir()]
