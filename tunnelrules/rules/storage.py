"""Persistence of the raw runtime rule document through the locked store."""

from __future__ import annotations

from ..config import Settings
from ..store.locked_store import LockedValueStore
from .document import RuleDocument, decode_document, empty_document, encode_document


def rule_document_store(settings: Settings) -> LockedValueStore[RuleDocument]:
    """Build the store holding the runtime rule document for these settings."""
    return LockedValueStore(
        settings.lock_path,
        settings.temp_path,
        settings.rules_path,
        encode=encode_document,
        decode=decode_document,
        default_value=empty_document,
    )
