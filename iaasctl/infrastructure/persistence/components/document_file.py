"""JSON document kept in a single file with atomic replacement."""

import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.persistence.exceptions import StorageError


class JSONDocumentFile:
    """
    One JSON object stored at ``path``.

    A missing or blank file reads as an empty document. Saving writes a
    sibling temporary file, fsyncs it and renames it over ``path``; readers
    see either the old or the new document.

    Because saving replaces the file, writers serialise on an exclusive
    ``flock`` of the sibling ``<path>.lock`` instead of the document itself.
    """

    def __init__(self, path: str, create_dirs: bool = True):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        if create_dirs:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.path.with_name(f"{self.path.name}.lock")

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold the exclusive cross-process lock of this document.

        Raises:
            StorageError: If the lock file cannot be opened
        """
        try:
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise StorageError(f"Cannot open lock file {self.lock_path}: {e}") from e
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self) -> Dict[str, Any]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        if not content.strip():
            return {}
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt document {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise StorageError(f"Document {self.path} is not a JSON object")
        return document

    def save(self, document: Dict[str, Any]) -> None:
        content = json.dumps(document, indent=2, sort_keys=True, default=str)
        try:
            fd, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_name, self.path)
            except OSError:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
        self.logger.debug(f"Wrote {self.path}")
