"""Storage initialization and the single-writer lock shared by the routes."""

import asyncio
from pathlib import Path

from raising_sim.storage import Storage

_data_dir: Path | None = None
_storage: Storage | None = None

# All mutating endpoints run under this lock: one writer per process.
game_lock = asyncio.Lock()


def init_storage(data_dir: Path) -> Storage:
    global _data_dir, _storage
    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    _storage = Storage(_data_dir)
    return _storage


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def get_storage() -> Storage:
    assert _storage is not None, "Call init_storage() before using storage"
    return _storage
