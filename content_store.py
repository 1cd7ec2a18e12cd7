"""Content store interface and local filesystem implementation."""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional

from models import ExportError


class ContentReadError(ExportError):
    """Raised when a document or file cannot be read from the content store."""
    pass


def normalize_path(path: str) -> str:
    """
    Normalize a logical content path.

    Converts backslashes to forward slashes, collapses duplicate separators
    and strips leading/trailing slashes. The root folder normalizes to ``"/"``.
    """
    if not path:
        return "/"
    parts = [part for part in path.replace('\\', '/').split('/') if part and part != '.']
    if not parts:
        return "/"
    return '/'.join(parts)


@dataclass(frozen=True)
class StoredFile:
    """A file listed from a content store."""

    path: str
    store: 'ContentStore'

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def parent(self) -> str:
        parent = str(PurePosixPath(self.path).parent)
        return "/" if parent == "." else parent

    def read(self) -> str:
        """Read the file's text content."""
        return self.store.read_file(self.path)


class ContentStore(ABC):
    """Abstract capability for reading files from the content tree."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('marp_slides_export.content_store')

    @property
    @abstractmethod
    def base_path(self) -> Optional[str]:
        """Absolute filesystem path of the content root, if the store has one."""
        pass

    @abstractmethod
    def read_file(self, path: str) -> str:
        """
        Read a text file by logical path.

        Raises:
            ContentReadError: If the file cannot be read
        """
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """
        Read a binary file by logical path.

        Raises:
            ContentReadError: If the file cannot be read
        """
        pass

    @abstractmethod
    def list_files(self, parent_folder: Optional[str] = None) -> List[StoredFile]:
        """
        List files, optionally only those directly inside ``parent_folder``.

        Args:
            parent_folder: Logical folder path; None lists every file
        """
        pass


class LocalContentStore(ContentStore):
    """Content store backed by a directory on the local filesystem."""

    def __init__(self, root: str, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.root = Path(root)

    @property
    def base_path(self) -> Optional[str]:
        return str(self.root)

    def _absolute(self, path: str) -> Path:
        logical = normalize_path(path)
        if logical == "/":
            return self.root
        return self.root.joinpath(*logical.split('/'))

    def read_file(self, path: str) -> str:
        try:
            return self._absolute(path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Failed to read '{path}': {e}")
            raise ContentReadError(f"Failed to read '{path}': {e}") from e

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._absolute(path).read_bytes()
        except OSError as e:
            self.logger.error(f"Failed to read '{path}': {e}")
            raise ContentReadError(f"Failed to read '{path}': {e}") from e

    def list_files(self, parent_folder: Optional[str] = None) -> List[StoredFile]:
        if parent_folder is not None:
            folder = self._absolute(parent_folder)
            if not folder.is_dir():
                self.logger.debug(f"Folder '{parent_folder}' does not exist in content store")
                return []
            candidates = [p for p in folder.iterdir() if p.is_file()]
        else:
            candidates = [p for p in self.root.rglob('*') if p.is_file()]

        files = []
        for candidate in sorted(candidates):
            relative = os.path.relpath(candidate, self.root)
            files.append(StoredFile(path=normalize_path(relative), store=self))
        return files


__all__ = ['ContentReadError', 'ContentStore', 'LocalContentStore', 'StoredFile', 'normalize_path']
