"""Filesystem operations on install directories.

Abstracted so uninstall can be tested, including removal failures, without
creating or deleting real directories.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from steamserv.core.errors import FilesystemError

logger = logging.getLogger(__name__)


class Filesystem(ABC):
    """Abstract interface for install-directory operations."""

    @abstractmethod
    def remove_file(self, path: Path) -> None:
        """Delete a single file. A missing file is not an error.

        Raises:
            FilesystemError: If the file exists but cannot be removed
        """
        ...

    @abstractmethod
    def remove_tree(self, path: Path) -> None:
        """Recursively delete a directory. A missing directory is not an error.

        Raises:
            FilesystemError: If the directory exists but cannot be removed
        """
        ...


class RealFilesystem(Filesystem):
    """Production implementation using shutil."""

    def remove_file(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not remove {path}: {e}") from e

    def remove_tree(self, path: Path) -> None:
        if not path.exists():
            logger.debug("Nothing to remove at %s", path)
            return
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(f"Could not remove {path}: {e}") from e
