"""
Key-value storage backends for session persistence.

The session store never talks to a storage substrate directly. It is handed
a KeyValueStore and reads/writes one JSON document per key, the same way a
browser app keeps one localStorage entry per simulation.

Two included implementations:
1. InMemoryStore - dict-based, data lost on exit (testing, embedding)
2. JsonFileStore - one <key>.json file per key in a directory (local durable)

Error contract:
- Backends raise on I/O failure (OSError and friends). Recovery policy
  (log and carry on) belongs to the SessionStore, not to the backend.
- get() returns None for a missing key; it never parses the payload.

Usage pattern:
    store = JsonFileStore(".econsim")   # or InMemoryStore()
    sessions = SessionStore(store)
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from .config import Config


class KeyValueStore(ABC):
    """Abstract string key -> JSON text store.

    Mirrors the get/set/delete surface of browser localStorage so the session
    lifecycle can be tested against an in-memory fake and deployed against a
    durable backend without changes.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Return the stored JSON text for a key.

        Args:
            key: Storage key

        Returns:
            Stored text, or None if the key is absent

        Raises:
            Exception: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store JSON text under a key, replacing any previous value.

        Args:
            key: Storage key
            value: Serialized JSON document

        Raises:
            Exception: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove a key. Deleting an absent key is a no-op.

        Args:
            key: Storage key

        Raises:
            Exception: If the backend cannot be modified
        """
        pass


class InMemoryStore(KeyValueStore):
    """Dict-backed store. Ephemeral, zero setup.

    Perfect for:
    - Unit testing (fast, isolated, no cleanup needed)
    - Embedding the engine in a process that owns persistence elsewhere

    NOT suitable for:
    - Resuming a run after the process exits
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> List[str]:
        """Stored keys, for inspection and tests."""
        return list(self.data)


class JsonFileStore(KeyValueStore):
    """File-backed store: one pretty-printed JSON file per key.

    Directory structure:
    ```
    {base_path}/
      sim_macroeconomic-policy.json
      sim_microecon-cafe.json
      ...
    ```

    Keys are percent-encoded into file names, so any key maps to exactly one
    file inside base_path. No locking: concurrent writers to the same key
    follow last-write-wins.
    """

    def __init__(self, base_path: Optional[Path | str] = None):
        self.base_path = Path(base_path) if base_path is not None else Config.STORAGE_DIR

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text("utf-8")

    def set(self, key: str, value: str) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # Write then rename so a crash mid-write never leaves a truncated file
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(value, "utf-8")
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def keys(self) -> List[str]:
        """Stored keys, decoded from file names."""
        if not self.base_path.exists():
            return []
        return sorted(unquote(path.stem) for path in self.base_path.glob("*.json"))

    def _path(self, key: str) -> Path:
        return self.base_path / f"{quote(key, safe='')}.json"
