from __future__ import annotations

from typing import Any, Dict, Iterable, Type

from pydantic import BaseModel

from common.health_check.models import (
    Animal,
    BreedingRecord,
    FarmSnapshot,
    FeedRecord,
    HealthRecord,
    Transaction,
)

# Collection name -> accepted payload keys (first match wins).
_COLLECTION_KEYS: Dict[str, tuple[str, ...]] = {
    "animals": ("animals", "goats"),
    "health_records": ("health_records", "healthRecords"),
    "breeding_records": ("breeding_records", "breedingRecords"),
    "feed_records": ("feed_records", "feedRecords"),
    "transactions": ("transactions",),
}

_COLLECTION_MODELS: Dict[str, Type[BaseModel]] = {
    "animals": Animal,
    "health_records": HealthRecord,
    "breeding_records": BreedingRecord,
    "feed_records": FeedRecord,
    "transactions": Transaction,
}

# Field aliases used by the farm records web app's local storage format.
_FIELD_ALIASES = {
    "earTag": "ear_tag",
    "dateOfBirth": "date_of_birth",
    "goatId": "animal_id",
    "animalId": "animal_id",
    "followUpDate": "follow_up_date",
    "doeId": "doe_id",
    "breedingDate": "breeding_date",
    "kiddingDate": "kidding_date",
    "feedType": "feed_type",
}


def farm_snapshot_from_payload(payload: dict[str, Any]) -> FarmSnapshot:
    """
    Build a FarmSnapshot from a JSON payload.

    Expected shape:
      {
        "animals": [{"id": "g1", "name": "...", "ear_tag": "A1", ...}],
        "health_records": [...],
        "breeding_records": [...],
        "feed_records": [...],
        "transactions": [...]
      }

    Notes:
    - camelCase keys (`goats`, `healthRecords`, `earTag`, `dateOfBirth`, ...) are accepted too
    - missing collections are treated as empty
    """
    if not isinstance(payload, dict):
        raise ValueError("Farm records payload must be an object.")

    collections: Dict[str, list[BaseModel]] = {}
    for collection, keys in _COLLECTION_KEYS.items():
        entries = _select_entries(payload, keys)
        model = _COLLECTION_MODELS[collection]
        parsed = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValueError(f"{collection} entries must be objects.")
            parsed.append(model.model_validate(_normalize_keys(entry)))
        collections[collection] = parsed

    return FarmSnapshot(**{name: tuple(items) for name, items in collections.items()})


def _select_entries(payload: dict[str, Any], keys: Iterable[str]) -> list[Any]:
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            raise ValueError(f"Farm records payload field '{key}' must be a list.")
        return value
    return []


def _normalize_keys(entry: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in entry.items():
        canonical = _FIELD_ALIASES.get(key, key)
        # Canonical snake_case keys win over aliases when both are present.
        if canonical in out and canonical != key:
            continue
        out[canonical] = value
    return out
