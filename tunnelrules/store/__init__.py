"""Crash-consistent single-value file storage guarded by advisory locks."""

from .locked_store import LockedValueStore
from .locks import AdvisoryLock, held_lock

__all__ = ["AdvisoryLock", "LockedValueStore", "held_lock"]
