"""
File system watcher for Table Upload domain.

Monitors the source directory tree for CSV files whose content changed and
queues them as candidates. Uses the watchdog library, polling by default so
that filesystems without reliable native notifications still work.
"""

import os
import queue
import threading
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Tuple

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from courier.models.schemas import CandidateFile
from courier.utils.helpers import is_csv, normalise_path


class CsvEventHandler(FileSystemEventHandler):
    """Forwards data changes of CSV files; every other event is dropped."""

    def __init__(self, on_candidate: Callable[[CandidateFile], None], accept_created: bool = False):
        """
        Initialize event handler.

        Args:
            on_candidate: Called with each CSV candidate
            accept_created: Treat creation of a non-empty file as a data change.
                Needed for snapshot polling, which reports a file written
                between two polls only as created.
        """
        super().__init__()
        self.on_candidate = on_candidate
        self.accept_created = accept_created

        # Last forwarded (size, mtime_ns) per CSV path
        self.fingerprints: Dict[Path, Tuple[int, int]] = {}

    def remember(self, path: Path) -> bool:
        """
        Record the content fingerprint of ``path``.

        Native observers report attribute changes (chmod, chown) as
        modifications; those leave size and mtime untouched.

        Returns:
            True if size or mtime differ from the last recorded values
        """
        try:
            stats = path.stat()
        except OSError:
            return False

        fingerprint = (stats.st_size, stats.st_mtime_ns)
        if self.fingerprints.get(path) == fingerprint:
            return False

        self.fingerprints[path] = fingerprint
        return True

    def seed(self, root: Path):
        """Record fingerprints of CSV files already present under ``root``."""
        try:
            for path in root.rglob("*.csv"):
                if path.is_file():
                    self.remember(path)
        except OSError as e:
            logger.warning(f"Could not scan existing files under {root}: {e}")

    def on_modified(self, event: FileSystemEvent):
        """Handle file content modification."""
        if event.is_directory:
            return

        self._forward(Path(os.fsdecode(event.src_path)))

    def on_created(self, event: FileSystemEvent):
        """Handle file creation, only when it already carries content."""
        if event.is_directory or not self.accept_created:
            return

        path = Path(os.fsdecode(event.src_path))
        try:
            if path.stat().st_size == 0:
                return
        except OSError:
            return

        self._forward(path)

    def on_deleted(self, event: FileSystemEvent):
        """Forget deleted files."""
        self.fingerprints.pop(Path(os.fsdecode(event.src_path)), None)

    def on_moved(self, event: FileSystemEvent):
        """Forget files moved away."""
        self.fingerprints.pop(Path(os.fsdecode(event.src_path)), None)

    def _forward(self, path: Path) -> None:
        if not is_csv(path):
            return

        if not self.remember(path):
            logger.debug(f"No content change, ignoring event for {path}")
            return

        logger.info(f"CSV file event detected: {path}")
        self.on_candidate(CandidateFile.from_path(path))


class ChangeMonitor:
    """Watches a directory tree and yields CSV candidates one at a time."""

    def __init__(self, root: Path, poll_interval: float = 2.0, use_polling: bool = True):
        """
        Initialize change monitor.

        Args:
            root: Directory watched recursively
            poll_interval: Seconds between polls, also the longest wait per step
            use_polling: Use snapshot polling instead of native OS events
        """
        self.root = normalise_path(Path(root))
        self.poll_interval = poll_interval
        self.use_polling = use_polling

        self.pending: "queue.Queue[CandidateFile]" = queue.Queue()
        self.handler = CsvEventHandler(self.pending.put, accept_created=use_polling)
        self.observer: Optional[BaseObserver] = None

        self._stop_event = threading.Event()
        self._watch_failing = False

    def _new_observer(self) -> BaseObserver:
        if self.use_polling:
            return PollingObserver(timeout=self.poll_interval)
        return Observer(timeout=self.poll_interval)

    def is_watching(self) -> bool:
        """Check that the observer and all of its emitters are running."""
        if self.observer is None or not self.observer.is_alive():
            return False
        return all(emitter.is_alive() for emitter in self.observer.emitters)

    def _report_watch_error(self, message: str):
        # Repeated failures of the same outage only log once at error level
        if self._watch_failing:
            logger.debug(message)
        else:
            logger.error(message)
        self._watch_failing = True

    def ensure_watching(self) -> bool:
        """
        Start the observer, or restart it if it stopped.

        Watch errors are logged and left for the next poll to retry.

        Returns:
            True if the root is being watched
        """
        if self.is_watching():
            return True

        if self.observer is not None:
            self._report_watch_error(f"Watch error: observer for {self.root} stopped, restarting")
            self._discard_observer()

        if not self.root.is_dir():
            self._report_watch_error(f"Watch error: {self.root} is not an accessible directory")
            return False

        self.handler.seed(self.root)
        observer = self._new_observer()
        try:
            observer.schedule(self.handler, str(self.root), recursive=True)
            observer.daemon = True
            observer.start()
        except Exception as e:
            self._report_watch_error(f"Watch error: failed to watch {self.root}: {e}")
            return False

        self.observer = observer
        self._watch_failing = False
        mode = "polling" if self.use_polling else "native"
        logger.success(f"Started watching: {self.root} ({mode}, every {self.poll_interval:g}s)")
        return True

    def _discard_observer(self):
        observer, self.observer = self.observer, None
        if observer is None:
            return
        try:
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=self.poll_interval)
        except Exception as e:
            logger.warning(f"Error stopping observer: {e}")

    def candidates(self) -> Iterator[CandidateFile]:
        """
        Yield CSV candidates until ``stop()`` is called.

        Each step waits at most one poll interval, so watch errors are
        retried and a stop request is noticed within that time.
        """
        while not self._stop_event.is_set():
            self.ensure_watching()

            try:
                candidate = self.pending.get(timeout=self.poll_interval)
            except queue.Empty:
                continue

            yield candidate

    def run(self, process: Callable[[CandidateFile], object]):
        """Process candidates sequentially until stopped."""
        logger.info(f"Starting change monitor on {self.root}...")

        try:
            for candidate in self.candidates():
                process(candidate)
        finally:
            self._discard_observer()
            logger.info("Change monitor stopped")

    def stop(self):
        """Request the monitor loop to stop."""
        self._stop_event.set()
