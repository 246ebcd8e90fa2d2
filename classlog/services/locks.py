# ABOUTME: Exclusive write locks for class log documents
# ABOUTME: Prefers a per-document file lock and falls back to a process-wide lock

import fcntl
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import IO, Iterator, Optional

from classlog.models.errors import LockTimeout
from classlog.services.workbook import Document

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.05

DOCUMENT_LOCK = "document"
PROCESS_LOCK = "process"


@dataclass
class LockHandle:
    kind: str
    lock_file: Optional[IO] = None
    released: bool = field(default=False)


class LockManager:
    """
    Serializes writers.

    A document lock is an exclusive flock on a sidecar file next to the
    workbook, so it holds across threads and processes. Without a document,
    or when the lock file cannot be opened, writers share one process lock.
    """

    def __init__(self):
        self._process_lock = threading.Lock()

    def acquire(self, doc: Optional[Document], timeout_ms: int) -> LockHandle:
        """Block up to timeout_ms for exclusive access; raises LockTimeout."""
        lock_file = self._open_lock_file(doc) if doc is not None else None
        if lock_file is None:
            if not self._process_lock.acquire(timeout=timeout_ms / 1000):
                raise LockTimeout(timeout_ms)
            return LockHandle(kind=PROCESS_LOCK)

        deadline = time.monotonic() + timeout_ms / 1000
        while True:
            try:
                fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
                return LockHandle(kind=DOCUMENT_LOCK, lock_file=lock_file)
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    lock_file.close()
                    raise LockTimeout(timeout_ms)
                time.sleep(POLL_INTERVAL_SECONDS)

    def release(self, handle: LockHandle) -> None:
        """Release a handle. Safe to call twice; errors are logged, never raised."""
        if handle.released:
            return
        handle.released = True
        try:
            if handle.kind == DOCUMENT_LOCK:
                try:
                    fcntl.flock(handle.lock_file, fcntl.LOCK_UN)
                finally:
                    handle.lock_file.close()
            else:
                self._process_lock.release()
        except Exception:
            logger.warning("Failed to release %s lock", handle.kind, exc_info=True)

    @contextmanager
    def hold(self, doc: Optional[Document], timeout_ms: int) -> Iterator[LockHandle]:
        handle = self.acquire(doc, timeout_ms)
        try:
            yield handle
        finally:
            self.release(handle)

    def _open_lock_file(self, doc: Document) -> Optional[IO]:
        try:
            return open(doc.lock_path, "a+")
        except OSError:
            logger.warning("Document lock unavailable for %s, using process lock", doc.id, exc_info=True)
            return None
