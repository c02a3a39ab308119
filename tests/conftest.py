"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from tunnelrules.config import Settings
from tunnelrules.rules.manager import RuleSetManager
from tunnelrules.store.locked_store import LockedValueStore


def _encode_json(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True).encode("utf-8")


def _decode_json(data: bytes) -> Any:
    return json.loads(data.decode("utf-8"))


@pytest.fixture
def json_store(tmp_path: Path) -> LockedValueStore[dict]:
    """A store of plain JSON objects under tmp_path."""
    return LockedValueStore(
        tmp_path / "value.lock",
        tmp_path / "value_temp.json",
        tmp_path / "value.json",
        encode=_encode_json,
        decode=_decode_json,
        default_value=dict,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at an isolated data directory."""
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def manager() -> RuleSetManager:
    """Manager with a small known built-in table."""
    return RuleSetManager(
        {
            "exclude": {"pkg.a": ["*"]},
            "include": {"pkg.inc": [">=10"]},
        }
    )
