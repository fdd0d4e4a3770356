"""Configuration store abstraction + JSON file implementation.

Configuration is a small versioned key-value store of named blobs
("vectors", "bundle_status", "bundle_settings"). Every save bumps the
version so readers can tell that something changed.
"""

import copy
import json
import os
from abc import ABC, abstractmethod
from typing import Any


class ConfigStore(ABC):
    """Abstract base for named configuration blobs."""

    @abstractmethod
    def get(self, name: str, default: Any = None) -> Any:
        """Return a copy of the named blob, or `default` if unset."""
        ...

    @abstractmethod
    def set(self, name: str, value: Any) -> None:
        """Stage a new value for the named blob. Call save() to persist."""
        ...

    @abstractmethod
    def save(self) -> None:
        """Persist staged values and bump the version."""
        ...

    @property
    @abstractmethod
    def version(self) -> int:
        ...

    def has(self, name: str) -> bool:
        return self.get(name) is not None


class JSONConfigStore(ConfigStore):
    """File-backed config store. Reloads on mtime change."""

    def __init__(self, path: str):
        self._path = path
        self._data: dict[str, Any] = {}
        self._version: int = 0
        self._last_mtime: float = 0.0
        self._dirty = False
        self._load()

    def _load(self) -> None:
        """Load config from the JSON file unless unsaved changes are pending."""
        if self._dirty:
            return
        try:
            mtime = os.path.getmtime(self._path)
        except OSError:
            return

        if mtime == self._last_mtime:
            return

        with open(self._path, encoding="utf-8") as f:
            payload = json.load(f)

        self._data = payload.get("data", {})
        self._version = int(payload.get("version", 0))
        self._last_mtime = mtime

    @property
    def version(self) -> int:
        self._load()
        return self._version

    def get(self, name: str, default: Any = None) -> Any:
        self._load()  # reload if file changed
        if name not in self._data:
            return default
        return copy.deepcopy(self._data[name])

    def set(self, name: str, value: Any) -> None:
        self._load()
        self._data[name] = copy.deepcopy(value)
        self._dirty = True

    def save(self) -> None:
        self._version += 1
        tmp_path = f"{self._path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"version": self._version, "data": self._data}, f, indent=2)
        # Single-file replace keeps each save atomic
        os.replace(tmp_path, self._path)
        self._last_mtime = os.path.getmtime(self._path)
        self._dirty = False
