"""
Crash-consistent storage of a single value in one file.

Every store instance owns three paths:

    lock   advisory lock file guarding reads and writes
    temp   scratch file for an in-progress write
    final  last fully committed value

A save writes the encoded value to temp, fsyncs it, then os.replace()s it
over final while holding an exclusive lock. A load reads final under a
shared lock. Final therefore only ever contains a complete value.

Failures never propagate to the caller: saves leave final untouched and
loads fall back to the default value. Every failure is logged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Generic, TypeVar

from ..errors import DecodeFailure, LockContention, StoreIOError
from .locks import held_lock

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LockedValueStore(Generic[T]):
    """
    Lock-guarded, atomically replaced persistence of one value of type T.

    Args:
        lock_path: Dedicated lock file
        temp_path: Scratch file for writes (same directory as final_path)
        final_path: Committed value
        encode: Serializes a value to bytes; any exception abandons the save
        decode: Parses bytes back into a value; any exception counts as a decode failure
        default_value: Supplies the value returned when nothing usable is stored
    """

    def __init__(
        self,
        lock_path: Path,
        temp_path: Path,
        final_path: Path,
        *,
        encode: Callable[[T], bytes],
        decode: Callable[[bytes], T],
        default_value: Callable[[], T],
    ):
        self.lock_path = Path(lock_path)
        self.temp_path = Path(temp_path)
        self.final_path = Path(final_path)
        self._encode = encode
        self._decode = decode
        self._default_value = default_value

    def default_value(self) -> T:
        return self._default_value()

    def save(self, value: T) -> bool:
        """
        Atomically replace the stored value.

        Returns:
            True if the value was committed, False if the save was abandoned
            (the previously committed value is then still in place).
        """
        try:
            with held_lock(self.lock_path, "exclusive"):
                self._write_locked(value)
        except LockContention as e:
            logger.error("Save aborted, lock already held by this process: %s", e)
            return False
        except StoreIOError as e:
            logger.error("Failed to save %s: %s", self.final_path, e)
            return False

        logger.debug("Committed %s", self.final_path)
        return True

    def _write_locked(self, value: T) -> None:
        try:
            try:
                data = self._encode(value)
            except Exception as e:
                # Encoders are caller-supplied; any failure abandons the save.
                raise StoreIOError(f"cannot encode value: {e!r}") from e

            try:
                self.final_path.parent.mkdir(parents=True, exist_ok=True)
                with self.temp_path.open("wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise StoreIOError(f"cannot write {self.temp_path}: {e}") from e

            try:
                os.replace(self.temp_path, self.final_path)
            except OSError as e:
                raise StoreIOError(f"cannot replace {self.final_path}: {e}") from e
        finally:
            self._remove_temp()

    def _remove_temp(self) -> None:
        try:
            self.temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to remove temp file %s: %s", self.temp_path, e)

    def _decode_bytes(self, data: bytes) -> T:
        try:
            return self._decode(data)
        except DecodeFailure:
            raise
        except Exception as e:
            raise DecodeFailure(f"cannot decode value: {e!r}") from e

    def load(self) -> T:
        """Return the committed value, or the default if none is usable."""
        try:
            with held_lock(self.lock_path, "shared"):
                if not self.final_path.exists():
                    logger.debug("No committed value at %s", self.final_path)
                    return self.default_value()
                data = self.final_path.read_bytes()
                return self._decode_bytes(data)
        except LockContention as e:
            logger.error("Load skipped, lock already held by this process: %s", e)
        except (StoreIOError, OSError) as e:
            logger.error("Failed to read %s: %s", self.final_path, e)
        except DecodeFailure as e:
            logger.error("Discarding undecodable content in %s: %s", self.final_path, e)
        return self.default_value()
