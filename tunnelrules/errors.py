"""
Failure kinds for the rule store and rule engine.

None of these escape the public store or manager operations; they are raised
internally and turned into a safe default plus a log entry. The CLI is the
only caller that sees ConfigError.
"""

from __future__ import annotations


class TunnelRulesError(Exception):
    """Base class for tunnelrules failures."""


class LockContention(TunnelRulesError):
    """This process already holds a conflicting lock on the same lock file."""

    def __init__(self, lock_path: str, requested: str, held: str):
        super().__init__(f"{requested} lock on {lock_path} conflicts with {held} lock held by this process")
        self.lock_path = lock_path
        self.requested = requested
        self.held = held


class StoreIOError(TunnelRulesError):
    """Write, flush, rename or read failure in the locked store."""


class DecodeFailure(TunnelRulesError):
    """Persisted content could not be decoded into a value."""


class ConfigError(TunnelRulesError):
    """Settings file is unreadable or invalid."""
