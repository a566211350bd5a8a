"""File-based transport of booter property stores."""

from __future__ import annotations

import itertools
import logging
import os
import tempfile
import threading
from enum import Enum
from pathlib import Path

from fork_booter.errors import TransportError
from fork_booter.properties import PropertyStore

logger = logging.getLogger(__name__)

BOOTER_FILE_PREFIX = "booter"
BOOTER_FILE_SUFFIX = ".properties"
WORKING_DIRECTORY_PREFIX = "fork-booter-"


class HandOffState(str, Enum):
    """Lifecycle of one booter file hand-off.

    The parent moves a file through CREATED, PERSISTED, SPAWNED and CLEANED.
    LOADED and CONSUMED are reached inside the worker and only show up in its
    debug log.
    """

    CREATED = "created"
    PERSISTED = "persisted"
    SPAWNED = "spawned"
    LOADED = "loaded"
    CONSUMED = "consumed"
    CLEANED = "cleaned"


class BooterFileTransport:
    """Persists stores to uniquely named files and loads them back.

    One transport owns one working directory, created on first use below
    ``temp_directory`` (the system temp directory when omitted). Every
    ``persist`` call takes the next launch id from a counter shared by all
    threads, so concurrent launches never write the same file.
    """

    def __init__(self, temp_directory: Path | str | None = None) -> None:
        self._temp_directory = Path(temp_directory) if temp_directory is not None else None
        self._working_directory: Path | None = None
        self._launch_ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def working_directory(self) -> Path | None:
        return self._working_directory

    def persist(self, store: PropertyStore) -> Path:
        """Write ``store`` to a new booter file and return its path."""
        with self._lock:
            launch_id = next(self._launch_ids)
            working_directory = self._ensure_working_directory()
        target = working_directory / (
            f"{BOOTER_FILE_PREFIX}-{os.getpid()}-{launch_id}{BOOTER_FILE_SUFFIX}"
        )
        partial = target.with_name(target.name + ".tmp")
        try:
            with partial.open("x", encoding="utf-8", newline="\n") as handle:
                store.store(handle)
            os.replace(partial, target)
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise TransportError(f"Failed to write booter file {target}: {exc}") from exc
        logger.debug("Persisted %d booter entries to %s", len(store), target)
        return target

    def load(self, handle: Path | str) -> PropertyStore:
        """Read and parse the booter file at ``handle``.

        Raises:
          TransportError: If the file cannot be read.
          FormatError: If its content is not valid booter text.
        """
        return load_booter_file(handle)

    def cleanup(self, handle: Path | str) -> None:
        """Remove a booter file; an already absent file is not an error."""
        path = Path(handle)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise TransportError(f"Failed to remove booter file {path}: {exc}") from exc
        logger.debug("Removed booter file %s", path)

    def dispose(self) -> None:
        """Remove the working directory once every booter file is gone."""
        with self._lock:
            directory = self._working_directory
            if directory is None:
                return
            try:
                directory.rmdir()
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Booter working directory %s not removed: %s", directory, exc)
                return
            self._working_directory = None

    def _ensure_working_directory(self) -> Path:
        if self._working_directory is None:
            base = self._temp_directory
            try:
                if base is not None:
                    base.mkdir(parents=True, exist_ok=True)
                created = tempfile.mkdtemp(
                    prefix=WORKING_DIRECTORY_PREFIX, dir=None if base is None else str(base)
                )
            except OSError as exc:
                raise TransportError(f"Failed to create booter working directory: {exc}") from exc
            self._working_directory = Path(created)
        return self._working_directory


def load_booter_file(handle: Path | str) -> PropertyStore:
    """Read a booter file without needing the transport that wrote it."""
    path = Path(handle)
    try:
        with path.open("r", encoding="utf-8", newline="") as source:
            store = PropertyStore.load(source)
    except (OSError, UnicodeDecodeError) as exc:
        raise TransportError(f"Failed to read booter file {path}: {exc}") from exc
    logger.debug("Loaded %d booter entries from %s", len(store), path)
    return store
