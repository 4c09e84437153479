"""Persistence port for shared-context documents.

A document is a JSON object stored under a short name ("project-context",
"communication-log", "backend-architecture-decision", ...). Writes replace
the whole document.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any, Iterator

import filelock

logger = logging.getLogger(__name__)


class ContextStore(ABC):
    """Abstract store of named JSON documents."""

    @abstractmethod
    def read(self, name: str) -> dict[str, Any] | None:
        """Return the document, or None if it has never been written."""
        ...

    @abstractmethod
    def write(self, name: str, document: dict[str, Any]) -> None:
        """Replace the document."""
        ...

    def exists(self, name: str) -> bool:
        return self.read(name) is not None

    def locked(self, name: str):
        """Context manager guarding a read-modify-write cycle on ``name``."""
        return nullcontext()


class FileContextStore(ContextStore):
    """Stores each document as ``<directory>/<name>.json``.

    Serialization is deterministic (indent=2, keys in insertion order), so
    writing the same document twice leaves byte-identical files. Files are
    replaced atomically.

    Args:
        directory: Shared-context directory (created on first write)
        use_lock: Take a ``<name>.json.lock`` file lock around
            read-modify-write cycles
        lock_timeout: Seconds to wait for the lock
    """

    def __init__(self, directory: Path | str, use_lock: bool = False, lock_timeout: float = 10) -> None:
        self.directory = Path(directory)
        self.use_lock = use_lock
        self.lock_timeout = lock_timeout

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def read(self, name: str) -> dict[str, Any] | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def write(self, name: str, document: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        data = json.dumps(document, indent=2, ensure_ascii=False) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s", path)

    @contextmanager
    def locked(self, name: str) -> Iterator[None]:
        if not self.use_lock:
            yield
            return

        self.directory.mkdir(parents=True, exist_ok=True)
        lock = filelock.FileLock(str(self.path_for(name)) + ".lock")
        lock.acquire(timeout=self.lock_timeout)
        try:
            yield
        finally:
            lock.release()


class InMemoryContextStore(ContextStore):
    """Dictionary-backed store for tests and dry runs."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}

    def read(self, name: str) -> dict[str, Any] | None:
        document = self.documents.get(name)
        return copy.deepcopy(document) if document is not None else None

    def write(self, name: str, document: dict[str, Any]) -> None:
        # Round-trip through JSON so only serializable documents are accepted
        self.documents[name] = json.loads(json.dumps(document))
