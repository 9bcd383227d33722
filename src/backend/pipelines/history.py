from __future__ import annotations

import logging
from typing import List, Optional

from common.health_check.models import HealthCheckResult, HistoryEntry

from .state_store import StateStore

logger = logging.getLogger(__name__)

LAST_RESULT_KEY = "health_check.last_result"
HISTORY_KEY = "health_check.history"


class HistoryStore:
    """Persists the latest full result and an append-only list of compact run summaries."""

    def __init__(self, store: StateStore, *, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1 when set")
        self._store = store
        self._max_entries = max_entries

    def save_result(self, result: HealthCheckResult) -> HistoryEntry:
        entry = HistoryEntry.from_result(result)
        self._store.save(LAST_RESULT_KEY, result.model_dump(mode="json"))

        raw_history = self._store.load(HISTORY_KEY) or []
        raw_history.append(entry.model_dump(mode="json"))
        if self._max_entries is not None and len(raw_history) > self._max_entries:
            # Oldest entries drop off the front; kept entries are never rewritten.
            raw_history = raw_history[-self._max_entries :]
        self._store.save(HISTORY_KEY, raw_history)
        return entry

    def load_last(self) -> Optional[HealthCheckResult]:
        raw = self._store.load(LAST_RESULT_KEY)
        if raw is None:
            return None
        return HealthCheckResult.model_validate(raw)

    def get_history(self) -> List[HistoryEntry]:
        raw_history = self._store.load(HISTORY_KEY) or []
        return [HistoryEntry.model_validate(item) for item in raw_history]
