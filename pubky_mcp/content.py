"""
Content Resolver

Reads bundled files from a set of named, read-only content roots. Callers
address content by (root name, relative path) only; no filesystem path ever
leaves this module.
"""

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Union

from .errors import ContentAccessError, NotFoundError, StartupWarning


@dataclass(frozen=True)
class ContentRoot:
    """A named directory holding one logical collection of bundled material."""
    name: str
    path: Path


class ContentResolver:
    """Resolve and read files across multiple named content roots."""

    def __init__(self, roots: Mapping[str, Union[str, Path]]):
        self._roots: Dict[str, ContentRoot] = {
            name: ContentRoot(name=name, path=Path(path).resolve())
            for name, path in roots.items()
        }

    @property
    def roots(self) -> List[ContentRoot]:
        return list(self._roots.values())

    def _root(self, root: str) -> ContentRoot:
        try:
            return self._roots[root]
        except KeyError:
            raise NotFoundError(f"Unknown content root: {root}") from None

    def resolve(self, root: str, relative_path: str) -> Path:
        """
        Resolve a relative path inside a named root.

        Args:
            root: Logical root name
            relative_path: Path relative to the root directory

        Returns:
            Absolute path guaranteed to lie inside the root

        Raises:
            NotFoundError: If the root name is not configured
            ContentAccessError: If the path escapes the root
        """
        content_root = self._root(root)
        if not relative_path or os.path.isabs(relative_path):
            raise ContentAccessError(f"Invalid path for root '{root}': {relative_path!r}")

        candidate = (content_root.path / relative_path).resolve()
        if candidate != content_root.path and content_root.path not in candidate.parents:
            raise ContentAccessError(f"Path escapes content root '{root}': {relative_path}")
        return candidate

    def exists(self, root: str, relative_path: str) -> bool:
        """Check whether a file exists inside a root."""
        return self.resolve(root, relative_path).is_file()

    def read_bytes(self, root: str, relative_path: str) -> bytes:
        """
        Read a file's full contents.

        Raises:
            NotFoundError: If the file does not exist or cannot be read
        """
        path = self.resolve(root, relative_path)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NotFoundError(f"File not found: {root}/{relative_path}") from None
        except PermissionError:
            raise NotFoundError(f"File not readable: {root}/{relative_path}") from None

    def read(self, root: str, relative_path: str) -> str:
        """
        Read a file as UTF-8 text.

        Raises:
            NotFoundError: If the file does not exist or cannot be read
            ContentAccessError: If the file is not valid UTF-8
        """
        try:
            return self.read_bytes(root, relative_path).decode("utf-8")
        except UnicodeDecodeError:
            raise ContentAccessError(f"File is not UTF-8 text: {root}/{relative_path}") from None

    def list_files(self, root: str, pattern: str = "**/*.md") -> List[str]:
        """
        List files in a root matching a glob pattern.

        Returns:
            Sorted relative paths (POSIX style); empty if the root is missing
        """
        content_root = self._root(root)
        if not content_root.path.is_dir():
            return []

        files = []
        for path in content_root.path.glob(pattern):
            resolved = path.resolve()
            # Skip symlinks pointing out of the root
            if content_root.path not in resolved.parents or not resolved.is_file():
                continue
            files.append(path.relative_to(content_root.path).as_posix())
        return sorted(files)

    def availability(self) -> Dict[str, bool]:
        """Report which roots are readable directories."""
        return {
            name: root.path.is_dir() and os.access(root.path, os.R_OK | os.X_OK)
            for name, root in self._roots.items()
        }

    def verify(self) -> bool:
        """
        Startup check for bundled content.

        Never raises: unreadable roots are reported as a StartupWarning, which
        configure_logging() routes into the log, and the server keeps serving
        metadata-only listings.

        Returns:
            True if every configured root is readable
        """
        missing = [name for name, ok in self.availability().items() if not ok]
        for name in missing:
            warnings.warn(f"Content root '{name}' not readable at {self._roots[name].path}", StartupWarning, stacklevel=2)
        return not missing
