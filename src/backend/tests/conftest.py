import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work,
# even when pytest's rootdir is the repository root.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import date, datetime, timedelta, timezone

import pytest

from common.health_check.config import HealthCheckConfig
from common.health_check.context import HealthSlice, RuleContext
from common.health_check.models import (
    Animal,
    BreedingRecord,
    FarmSnapshot,
    FeedRecord,
    HealthRecord,
    Transaction,
)


@pytest.fixture
def today() -> date:
    return date(2025, 6, 15)


@pytest.fixture
def fixed_clock(today):
    def _clock() -> datetime:
        return datetime(today.year, today.month, today.day, 9, 30, tzinfo=timezone.utc)

    return _clock


@pytest.fixture
def make_ctx(today):
    def _make(*, rules: dict | None = None, **settings) -> RuleContext:
        return RuleContext(today=today, config=HealthCheckConfig(rules=rules or {}, **settings))

    return _make


@pytest.fixture
def make_animal(today):
    counter = {"n": 0}

    def _make(**overrides) -> Animal:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "id": f"g{n}",
            "name": f"Goat {n}",
            "ear_tag": f"T{n:03d}",
            "breed": "Alpine",
            "gender": "female",
            "date_of_birth": today - timedelta(days=3 * 365),
        }
        fields.update(overrides)
        return Animal(**fields)

    return _make


@pytest.fixture
def make_health_record(today):
    counter = {"n": 0}

    def _make(**overrides) -> HealthRecord:
        counter["n"] += 1
        fields = {
            "id": f"h{counter['n']}",
            "animal_id": "g1",
            "date": today - timedelta(days=30),
            "treatment": "Vaccination",
        }
        fields.update(overrides)
        return HealthRecord(**fields)

    return _make


@pytest.fixture
def make_breeding_record(today):
    counter = {"n": 0}

    def _make(**overrides) -> BreedingRecord:
        counter["n"] += 1
        fields = {
            "id": f"b{counter['n']}",
            "doe_id": "g1",
            "doe": "Goat 1",
            "buck": "Billy",
            "status": "bred",
            "breeding_date": today - timedelta(days=60),
        }
        fields.update(overrides)
        return BreedingRecord(**fields)

    return _make


@pytest.fixture
def make_transaction(today):
    counter = {"n": 0}

    def _make(**overrides) -> Transaction:
        counter["n"] += 1
        fields = {
            "id": f"t{counter['n']}",
            "description": "Feed purchase",
            "amount": "250",
            "date": today - timedelta(days=5),
            "category": "feed",
        }
        fields.update(overrides)
        return Transaction(**fields)

    return _make


@pytest.fixture
def make_feed_record(today):
    counter = {"n": 0}

    def _make(**overrides) -> FeedRecord:
        counter["n"] += 1
        fields = {
            "id": f"f{counter['n']}",
            "date": today,
            "feed_type": "Hay",
            "quantity": "20",
        }
        fields.update(overrides)
        return FeedRecord(**fields)

    return _make


@pytest.fixture
def make_snapshot():
    def _make(
        *,
        animals=(),
        health_records=(),
        breeding_records=(),
        feed_records=(),
        transactions=(),
    ) -> FarmSnapshot:
        return FarmSnapshot(
            animals=tuple(animals),
            health_records=tuple(health_records),
            breeding_records=tuple(breeding_records),
            feed_records=tuple(feed_records),
            transactions=tuple(transactions),
        )

    return _make


@pytest.fixture
def make_health_slice():
    def _make(*, health_records=(), animals=()) -> HealthSlice:
        return HealthSlice(health_records=tuple(health_records), animals=tuple(animals))

    return _make
