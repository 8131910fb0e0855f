"""Filesystem Gateway - enumerate candidate source files for a subject namespace."""

import logging
import os
from pathlib import Path
from typing import Iterator

from coupling_detector.domain.entities import QualifiedName
from coupling_detector.domain.errors import SourceRootError

logger = logging.getLogger(__name__)


class SourceScanner:
    """
    Lazy, restartable sequence of source files under ``root/<subject as path>``.

    Every iteration walks the filesystem again and yields paths in sorted
    order. The root must exist; a missing subject directory is simply empty.
    """

    def __init__(self, root: str, subject: str, extension: str = ".php") -> None:
        self.root = Path(root)
        self.subject = QualifiedName.parse(subject)
        self.extension = extension
        self._check_root()

    def _check_root(self) -> None:
        if not self.root.exists():
            raise SourceRootError(f"Source root does not exist: {self.root}")
        if not self.root.is_dir():
            raise SourceRootError(f"Source root is not a directory: {self.root}")
        if not os.access(self.root, os.R_OK | os.X_OK):
            raise SourceRootError(f"Source root is not readable: {self.root}")

    @property
    def directory(self) -> Path:
        """Directory derived from the subject namespace segments."""
        return self.root.joinpath(*self.subject.segments)

    def __iter__(self) -> Iterator[str]:
        directory = self.directory
        if not directory.is_dir():
            logger.debug("No directory %s for namespace %s", directory, self.subject)
            return iter(())
        return (str(path) for path in sorted(directory.rglob(f"*{self.extension}")) if path.is_file())

    def __len__(self) -> int:
        return sum(1 for _ in self)
