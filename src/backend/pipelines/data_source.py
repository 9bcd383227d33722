from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from adapters.farm_records import farm_snapshot_from_payload
from common.health_check.models import FarmSnapshot


class FarmDataSource(Protocol):
    def load_snapshot(self) -> FarmSnapshot:
        """Return the current record collections for one health check run."""
        ...


def get_data_source(name: str, *, path: Path | None = None) -> FarmDataSource:
    """Resolve a data source implementation by name (json|empty)."""
    source = (name or "").strip().lower()
    if source in ("json", ""):
        if path is None:
            raise ValueError("The json data source requires a path.")
        return JsonFileDataSource(path)
    if source == "empty":
        return StaticDataSource(FarmSnapshot())
    raise ValueError(f"Unknown data source '{name}' (expected 'json' or 'empty').")


class StaticDataSource:
    def __init__(self, snapshot: FarmSnapshot) -> None:
        self._snapshot = snapshot

    def load_snapshot(self) -> FarmSnapshot:
        return self._snapshot


class JsonFileDataSource:
    """Reads the farm records export on every call, so each run sees the latest file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def load_snapshot(self) -> FarmSnapshot:
        with self._path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return farm_snapshot_from_payload(payload)
