"""
File system watcher for CDN Cert Sync.

Uses the watchdog library to monitor the directories holding the
certificate and private key, and reports changes to exactly those
two files.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from typing import Any

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


def _normalise(path: str | bytes | os.PathLike) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class CertificateFileHandler(FileSystemEventHandler):
    """Watchdog handler that forwards events for a fixed set of files."""

    def __init__(self, paths: Iterable[str | os.PathLike], on_change: Callable[[str], None]):
        super().__init__()
        self._paths = {_normalise(p) for p in paths}
        self._on_change = on_change

    def _is_watched(self, path: str | bytes) -> bool:
        return bool(path) and _normalise(path) in self._paths

    def _changed(self, path: str) -> None:
        try:
            self._on_change(path)
        except Exception:
            logger.exception("Error in on_change callback for %s", path)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle a file appearing (including a re-created certificate)."""
        if event.is_directory or not self._is_watched(event.src_path):
            return
        logger.info("File %s has been added", event.src_path)
        self._changed(os.fsdecode(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle an in-place write."""
        if event.is_directory or not self._is_watched(event.src_path):
            return
        logger.info("File %s has been changed", event.src_path)
        self._changed(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemMovedEvent) -> None:  # type: ignore[override]
        """Handle an atomic replace (temp file renamed over the target)."""
        if event.is_directory:
            return
        if self._is_watched(event.dest_path):
            logger.info("File %s has been replaced", event.dest_path)
            self._changed(os.fsdecode(event.dest_path))
        elif self._is_watched(event.src_path):
            logger.info("File %s has been moved away", event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Log removals; a deleted certificate is never uploaded."""
        if event.is_directory or not self._is_watched(event.src_path):
            return
        logger.info("File %s has been removed", event.src_path)


class CertificateWatcher:
    """Watches a certificate and key file and reports changes to either.

    Usage:
        watcher = CertificateWatcher([cert, key], on_change)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        paths: Iterable[str | os.PathLike],
        on_change: Callable[[str], None],
    ):
        self.paths = [os.fsdecode(p) for p in paths]
        self._handler = CertificateFileHandler(self.paths, on_change)
        self._observer: Any | None = None

    @property
    def directories(self) -> list[str]:
        """Return the unique parent directories to schedule, in order."""
        seen: list[str] = []
        for path in self.paths:
            parent = os.path.dirname(os.path.abspath(path))
            if parent not in seen:
                seen.append(parent)
        return seen

    # ---- lifecycle ----

    def start(self) -> None:
        """Start watching the certificate directories."""
        directories = self.directories
        for directory in directories:
            if not os.path.isdir(directory):
                logger.error("Certificate folder does not exist: %s", directory)
                raise FileNotFoundError(f"Certificate folder does not exist: {directory}")

        observer = Observer()
        for directory in directories:
            observer.schedule(self._handler, directory, recursive=False)
        observer.start()
        self._observer = observer
        for path in self.paths:
            if not os.path.isfile(path):
                logger.warning("Watched file does not exist yet: %s", path)
        logger.info("Watching %s", ", ".join(self.paths))
        logger.info("Initial scan complete. Ready for changes")

    def stop(self) -> None:
        """Stop watching and release resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("Watcher stopped.")

    @property
    def is_running(self) -> bool:
        """Return whether the watcher is currently active."""
        return self._observer is not None and self._observer.is_alive()
