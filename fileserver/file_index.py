"""Lock-guarded set of the file names the server holds."""

import threading
from typing import Iterable, Set

from common.logging_config import get_logger
from fileserver.file_storage import FileStorage

logger = get_logger(__name__)


class SharedFileIndex:
    """
    Thread-safe set of file names shared by every connection handler.

    Each operation takes the lock once; no lock is held across network or
    disk I/O. Entries are never evicted.
    """

    def __init__(self, names: Iterable[str] = ()):
        """Initialize index, optionally seeded with names."""
        self._lock = threading.Lock()
        self._names: Set[str] = set(names)

    @classmethod
    def from_storage(cls, storage: FileStorage) -> 'SharedFileIndex':
        """
        Build an index holding every entry of the server directory.

        Args:
            storage: Server file storage to scan

        Returns:
            Populated SharedFileIndex
        """
        index = cls()
        count = index.load_from_storage(storage)
        logger.info(f"Indexed {count} file(s) from {storage.root}")
        return index

    def load_from_storage(self, storage: FileStorage) -> int:
        """
        Insert every entry name found in the server directory.

        Returns:
            Number of entries scanned
        """
        names = storage.list_file_names()
        with self._lock:
            self._names.update(names)
        return len(names)

    def insert(self, name: str) -> bool:
        """
        Add a name.

        Returns:
            True if the name was new, False if it was already indexed
        """
        with self._lock:
            if name in self._names:
                return False
            self._names.add(name)
            return True

    def snapshot(self) -> Set[str]:
        """Return a copy of the current names, safe to iterate without the lock."""
        with self._lock:
            return set(self._names)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)
