"""
Key-value storage for the cart and the active coupon.

Values are JSON-serializable objects. Callers treat writes as best-effort.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

CART_KEY = "cart"
COUPON_KEY = "coupon"


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # Stored serialized so callers never share mutable state with the store
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """One JSON file per key under `directory`, optionally namespaced (e.g. per chat session)."""

    def __init__(self, directory: Path, namespace: str = "default"):
        safe_namespace = re.sub(r"[^A-Za-z0-9_.-]", "_", namespace)
        # "." and ".." would point at the root itself or its parent
        if not safe_namespace.strip("."):
            safe_namespace = "default"
        root = Path(directory).resolve()
        self.directory = (root / safe_namespace).resolve()
        if self.directory.parent != root:
            raise ValueError(f"Storage namespace {namespace!r} escapes {root}")

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(value, f)
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
