"""Key-value persistence for the ledger and drill schedules.

Repositories serialize their whole state to one JSON string under a fixed
key and hand it to a ``KeyValueStore``. ``JsonFileStore`` keeps one
``<key>.json`` file per key under the data directory; ``MemoryStore`` keeps
everything in a dict for tests and throwaway sessions.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from .config import get_data_path

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Storage contract used by the repositories."""

    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...

    def remove(self, name: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def remove(self, name: str) -> None:
        self._values.pop(name, None)


class JsonFileStore:
    """One JSON file per key under a directory (default: the milpay data dir)."""

    def __init__(self, directory: Optional[Path] = None):
        self._directory = Path(directory) if directory is not None else None

    @property
    def directory(self) -> Path:
        if self._directory is None:
            return get_data_path()
        self._directory.mkdir(parents=True, exist_ok=True)
        return self._directory

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def get(self, name: str) -> Optional[str]:
        path = self.path_for(name)
        if not path.exists():
            return None
        with open(path, "r") as f:
            return f.read()

    def set(self, name: str, value: str) -> None:
        path = self.path_for(name)
        # Atomic replace
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            f.write(value)
        tmp_path.replace(path)
        logger.debug(f"Saved {name} to {path}")

    def remove(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed {path}")
