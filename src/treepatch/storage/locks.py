"""File locking around read-apply-write cycles on one document."""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from pathlib import Path

from filelock import FileLock, Timeout

from treepatch.core.errors import TreepatchError


class LockTimeout(TreepatchError):
    """Raised when a lock cannot be acquired within the timeout period."""

    code = "LOCK_TIMEOUT"


def lock_path_for(document: Path) -> Path:
    """Lock file for *document*: a hidden sibling named after it."""
    return document.parent / f".{document.name}.lock"


@contextlib.contextmanager
def document_lock(document: Path, timeout: float = 10) -> Generator[None, None, None]:
    """Hold an exclusive lock on *document* for the duration of the block.

    Edits to one document must be applied by one writer at a time; the
    applier itself does no locking.

    Raises:
        LockTimeout: If the lock cannot be acquired within *timeout* seconds.
    """
    lock = FileLock(lock_path_for(document), timeout=timeout)
    try:
        lock.acquire()
    except Timeout:
        raise LockTimeout(f"Could not lock '{document.name}' within {timeout}s") from None
    try:
        yield
    finally:
        lock.release()
