"""
Advisory file locks on a dedicated lock file.

The OS lock is not reentrant: a second acquisition from the same process
would block forever on POSIX flock (separate descriptors) or be refused
outright on other platforms. Acquisitions are therefore also recorded in a
process-wide table, and a request that conflicts with a lock this process
already holds fails immediately with LockContention instead of blocking.

Shared requests only conflict with an exclusive holder; exclusive requests
conflict with any holder. On Windows every lock is exclusive, so any second
request conflicts.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Literal

from ..errors import LockContention, StoreIOError

logger = logging.getLogger(__name__)

LockMode = Literal["shared", "exclusive"]

# Process-wide table: resolved lock path -> modes currently held.
_HELD: dict[str, list[LockMode]] = {}
_HELD_GUARD = threading.Lock()

# False where the OS lock has no shared mode (msvcrt).
SHARED_LOCKS = os.name != "nt"


if os.name == "nt":  # pragma: no cover - exercised on Windows only
    import errno
    import msvcrt

    def _os_lock(handle: IO[bytes], mode: LockMode) -> None:
        # msvcrt has no shared locks; readers take the exclusive byte-range lock.
        handle.seek(0)
        while True:
            try:
                msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, 1)
                return
            except OSError as e:
                if e.errno != errno.EDEADLK:
                    raise

    def _os_unlock(handle: IO[bytes]) -> None:
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)

else:
    import fcntl

    def _os_lock(handle: IO[bytes], mode: LockMode) -> None:
        flag = fcntl.LOCK_SH if mode == "shared" else fcntl.LOCK_EX
        while True:
            try:
                fcntl.flock(handle.fileno(), flag)
                return
            except InterruptedError:
                continue

    def _os_unlock(handle: IO[bytes]) -> None:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def _register(key: str, mode: LockMode) -> None:
    with _HELD_GUARD:
        held = _HELD.get(key, [])
        if held and (mode == "exclusive" or "exclusive" in held or not SHARED_LOCKS):
            raise LockContention(key, mode, held[0])
        _HELD.setdefault(key, []).append(mode)


def _unregister(key: str, mode: LockMode) -> None:
    with _HELD_GUARD:
        held = _HELD.get(key)
        if not held:
            return
        held.remove(mode)
        if not held:
            del _HELD[key]


def held_modes(path: Path) -> list[LockMode]:
    """Modes this process currently holds on a lock file (for diagnostics)."""
    with _HELD_GUARD:
        return list(_HELD.get(str(Path(path).resolve()), []))


class AdvisoryLock:
    """
    One acquisition of an advisory lock on `path`.

    An instance holds at most one lock at a time. Acquisition blocks until
    other processes release a conflicting lock; there is no timeout.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._key = str(self.path.resolve())
        self._handle: IO[bytes] | None = None
        self._mode: LockMode | None = None

    @property
    def mode(self) -> LockMode | None:
        return self._mode

    def acquire_exclusive(self) -> None:
        self._acquire("exclusive")

    def acquire_shared(self) -> None:
        self._acquire("shared")

    def _acquire(self, mode: LockMode) -> None:
        if self._mode is not None:
            raise LockContention(self._key, mode, self._mode)

        _register(self._key, mode)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = self.path.open("a+b")
        except OSError as e:
            _unregister(self._key, mode)
            raise StoreIOError(f"cannot open lock file {self.path}: {e}") from e

        try:
            _os_lock(handle, mode)
        except OSError as e:
            handle.close()
            _unregister(self._key, mode)
            raise StoreIOError(f"cannot lock {self.path}: {e}") from e

        self._handle = handle
        self._mode = mode

    def release(self) -> None:
        """Release the lock; a no-op if nothing is held."""
        handle, mode = self._handle, self._mode
        if handle is None or mode is None:
            return
        self._handle = None
        self._mode = None
        try:
            _os_unlock(handle)
        finally:
            handle.close()
            _unregister(self._key, mode)


@contextmanager
def held_lock(path: Path, mode: LockMode) -> Iterator[AdvisoryLock]:
    """
    Hold an advisory lock for the duration of the block.

    Raises:
        LockContention: This process already holds a conflicting lock.
        StoreIOError: The lock file cannot be opened or locked.
    """
    lock = AdvisoryLock(path)
    if mode == "shared":
        lock.acquire_shared()
    else:
        lock.acquire_exclusive()
    try:
        yield lock
    finally:
        try:
            lock.release()
        except OSError as e:
            logger.error("Failed to release lock %s: %s", path, e)
