from __future__ import annotations

import copy
import json
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol


class StateStore(Protocol):
    def load(self, key: str) -> Optional[Any]:
        """Return the JSON-compatible value saved under `key`, or None."""
        ...

    def save(self, key: str, value: Any) -> None:
        """Persist a JSON-compatible value under `key`, replacing any previous value."""
        ...


class InMemoryStateStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    def save(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class LocalStateStore:
    """One JSON file per key under `root_dir`."""

    root_dir: Path

    def _path(self, key: str) -> Path:
        name = _SAFE_KEY.sub("_", key).strip("._") or "state"
        return Path(self.root_dir) / f"{name}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(value, handle, indent=2)
        tmp_path.replace(path)
