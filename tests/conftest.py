"""
Pytest Configuration and Shared Fixtures
"""

import logging

import pytest

from excaliapp.storage.drawing_store import Drawing, DrawingStore


ENV_VARS = [
    "EXCALIAPP_DATA_DIR",
    "EXCALIAPP_APP_DIR_NAME",
    "EXCALIAPP_SKIP_INVALID_METADATA",
    "EXCALIAPP_LOG_LEVEL",
    "EXCALIAPP_LOG_FILE",
    "XDG_DATA_HOME",
    "XDG_CONFIG_HOME",
    "APPDATA",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "drawings"


@pytest.fixture
def store(storage_dir):
    return DrawingStore(storage_dir)


@pytest.fixture
def make_drawing():
    def _make(**overrides):
        fields = {
            "id": "abc",
            "user_id": "u1",
            "name": "Draft",
            "content": "DATA1",
            "thumbnail": "",
            "is_public": False,
        }
        fields.update(overrides)
        return Drawing(**fields)
    return _make
