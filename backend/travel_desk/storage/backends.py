from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from travel_desk.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    """String key-value storage with the surface of browser local storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class InMemoryKeyValueStore:
    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.items: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self.items.items() if k != key)
            if used + len(key) + len(value) > self.quota_bytes:
                raise PersistenceError(
                    f"Storage quota exceeded writing {key!r} ({self.quota_bytes} bytes)"
                )
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self.items)


class FileKeyValueStore:
    """One ``<key>.json`` file per key under ``directory``."""

    suffix = ".json"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}{self.suffix}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8") if path.is_file() else None
        except OSError as exc:
            raise PersistenceError(f"Cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot remove {path}: {exc}") from exc

    def keys(self) -> List[str]:
        if not self.directory.exists():
            return []
        return sorted(p.name[: -len(self.suffix)] for p in self.directory.glob(f"*{self.suffix}"))


def build_backend(kind: str, directory: str | Path) -> KeyValueBackend:
    if kind == "file":
        logger.info("Using file key-value storage at %s", directory)
        return FileKeyValueStore(directory)
    if kind != "memory":
        raise ValueError(f"Unknown storage backend: {kind}")
    return InMemoryKeyValueStore()
