"""
Leaderboard Storage

Storage ports that hold the serialized leaderboard snapshot. The store only
ever loads or saves one complete text blob, so ranking logic does not care
where it lives.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class StorageError(Exception):
    """Raised when a snapshot cannot be read or written."""


class StoragePort(ABC):
    """Load/save interface for a leaderboard snapshot."""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Returns the stored snapshot, or None when nothing has been saved."""

    @abstractmethod
    def save(self, text: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryStorage(StoragePort):
    """Keeps the snapshot in process memory."""

    def __init__(self, initial: Optional[str] = None):
        self.text = initial
        self.save_count = 0

    def load(self) -> Optional[str]:
        return self.text

    def save(self, text: str) -> None:
        self.text = text
        self.save_count += 1

    def clear(self) -> None:
        self.text = None


class FileStorage(StoragePort):
    """
    Keeps the snapshot in a CSV file on disk.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never see a half-written snapshot.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        try:
            # Undecodable bytes become U+FFFD
            return self.path.read_text(encoding='utf-8', errors='replace')
        except FileNotFoundError:
            return None
        except (OSError, UnicodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

    def save(self, text: str) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix='.tmp', dir=str(self.path.parent)
            )
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(text)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, UnicodeError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except (OSError, UnicodeError) as e:
            raise StorageError(f"Failed to remove {self.path}: {e}") from e
