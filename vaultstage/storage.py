"""
Client storage for vaultstage.

A small key/value store standing in for browser local storage: it holds the
bearer token, the vault URL and branding preferences between runs. Staged
operations are never written here.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger()

TOKEN_KEY = "cyberark_token"
URL_KEY = "cyberark_url"
BRANDING_KEY = "brandingPreferences"

STORAGE_FILENAME = "storage.json"


class ClientStorage(ABC):
    """Interface shared by the storage backends."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or the default."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every key."""


class MemoryStorage(ClientStorage):
    """In-process storage. Used by tests and debug sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class FileStorage(ClientStorage):
    """
    JSON file storage inside the configured state directory.

    The file is created lazily on first write with mode 0600 since it
    holds a bearer token.

    Example:
        ```python
        storage = FileStorage(config.state_dir)
        storage.set(TOKEN_KEY, token)
        ```
    """

    def __init__(self, state_dir: Path) -> None:
        self.path = Path(state_dir) / STORAGE_FILENAME

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("storage_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
