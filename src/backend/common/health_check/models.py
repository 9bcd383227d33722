from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def priority(self) -> int:
        # Lower is more urgent.
        return _SEVERITY_PRIORITY[self]

    @property
    def summary_field(self) -> str:
        return f"{self.value.lower()}_issues"

    def at_least(self, floor: "Severity") -> bool:
        return self.priority <= floor.priority


_SEVERITY_PRIORITY = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
    Severity.INFO: 4,
}


class Category(str, Enum):
    ANIMALS = "animals"
    HEALTH = "health"
    BREEDING = "breeding"
    FINANCIAL = "financial"
    FEED = "feed"
    INTEGRITY = "integrity"


CATEGORY_DISPLAY_NAMES = {
    Category.ANIMALS.value: "Animal Records",
    Category.HEALTH.value: "Health Records",
    Category.BREEDING.value: "Breeding Records",
    Category.FINANCIAL.value: "Financial Records",
    Category.FEED.value: "Feed Records",
    Category.INTEGRITY.value: "Data Integrity",
}


def category_display_name(category: str) -> str:
    if category in CATEGORY_DISPLAY_NAMES:
        return CATEGORY_DISPLAY_NAMES[category]
    return category[:1].upper() + category[1:]


# ---------------------------------------------------------------------------
# Farm records (owned by the farm data repository; read-only here)
# ---------------------------------------------------------------------------


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class FarmRecord(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str

    @field_validator(
        "date_of_birth",
        "date",
        "follow_up_date",
        "breeding_date",
        "kidding_date",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def blank_dates_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class Animal(FarmRecord):
    name: Optional[str] = None
    ear_tag: Optional[str] = None
    breed: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None


class HealthRecord(FarmRecord):
    animal_id: Optional[str] = None
    date: Optional[dt.date] = None
    treatment: Optional[str] = None
    follow_up_date: Optional[dt.date] = None


class BreedingRecord(FarmRecord):
    doe_id: Optional[str] = None
    doe: Optional[str] = None
    buck: Optional[str] = None
    status: Optional[str] = None
    breeding_date: Optional[date] = None
    kidding_date: Optional[date] = None


class Transaction(FarmRecord):
    description: str = ""
    amount: Decimal = Decimal("0")
    date: Optional[dt.date] = None
    category: str = ""
    receipt: Optional[str] = None
    documentation: Optional[str] = None


class FeedRecord(FarmRecord):
    date: Optional[dt.date] = None
    feed_type: str = ""
    quantity: Optional[Decimal] = None


class FarmSnapshot(BaseModel):
    """Every record collection handed to one health check run."""

    model_config = ConfigDict(frozen=True)

    animals: Tuple[Animal, ...] = ()
    health_records: Tuple[HealthRecord, ...] = ()
    breeding_records: Tuple[BreedingRecord, ...] = ()
    feed_records: Tuple[FeedRecord, ...] = ()
    transactions: Tuple[Transaction, ...] = ()


# ---------------------------------------------------------------------------
# Findings: one concrete occurrence of a problem, tagged per rule family
# ---------------------------------------------------------------------------


class ReadOnlyDict(dict):
    """A dict that refuses in-place changes once built."""

    def _readonly(self, *args: Any, **kwargs: Any) -> None:
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


class FindingBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class MissingFieldsFinding(FindingBase):
    kind: Literal["missing_fields"] = "missing_fields"
    entity_id: str
    name: str = "Unnamed"
    ear_tag: Optional[str] = None
    missing: Tuple[str, ...] = ()

    def summary(self) -> str:
        return f"{self.name} ({self.ear_tag or 'no tag'}) missing {', '.join(self.missing)}"


class DuplicateKeyFinding(FindingBase):
    kind: Literal["duplicate_key"] = "duplicate_key"
    key_field: str
    key_value: str
    count: int
    entity_ids: Tuple[str, ...] = ()
    entity_names: Tuple[str, ...] = ()

    def summary(self) -> str:
        return f"{self.key_field} {self.key_value} shared by {self.count} records: {', '.join(self.entity_ids)}"


class DateRangeFinding(FindingBase):
    kind: Literal["date_range"] = "date_range"
    entity_id: str
    name: str = "Unnamed"
    ear_tag: Optional[str] = None
    field: str
    value: date
    problem: Literal["future_date", "implausible_age"]
    message: str

    def summary(self) -> str:
        return f"{self.name} ({self.ear_tag or 'no tag'}): {self.message} ({self.field}={self.value.isoformat()})"


class StalenessFinding(FindingBase):
    kind: Literal["staleness"] = "staleness"
    entity_id: str
    name: str = "Unnamed"
    ear_tag: Optional[str] = None
    last_seen: Optional[date] = None
    window_start: date

    @property
    def last_seen_label(self) -> str:
        return self.last_seen.isoformat() if self.last_seen else "Never"

    def summary(self) -> str:
        return f"{self.name} ({self.ear_tag or 'no tag'}) last seen: {self.last_seen_label}"


class OverdueFinding(FindingBase):
    kind: Literal["overdue"] = "overdue"
    record_id: str
    subject_id: Optional[str] = None
    label: str
    reference_date: Optional[date] = None
    scheduled_date: date
    days_overdue: int

    def summary(self) -> str:
        return (
            f"ID: {self.record_id} - {self.label} due {self.scheduled_date.isoformat()} "
            f"({self.days_overdue} day(s) overdue)"
        )


class MissingDocumentationFinding(FindingBase):
    kind: Literal["missing_documentation"] = "missing_documentation"
    record_id: str
    description: str = ""
    amount: Decimal
    date: Optional[dt.date] = None
    category: str = ""

    def summary(self) -> str:
        return f"ID: {self.record_id} - {self.description or 'Transaction'} ({self.amount})"


class IntervalGapFinding(FindingBase):
    kind: Literal["interval_gap"] = "interval_gap"
    start: date
    end: date
    gap_days: int
    label: str = ""

    def summary(self) -> str:
        text = f"{self.gap_days} day gap between {self.start.isoformat()} and {self.end.isoformat()}"
        if self.label:
            text += f" ({self.label})"
        return text


class OrphanedReferenceFinding(FindingBase):
    kind: Literal["orphaned_reference"] = "orphaned_reference"
    source_collection: str
    record_id: str
    missing_key: Optional[str] = None
    description: str = ""

    def summary(self) -> str:
        return (
            f"{self.source_collection} {self.record_id} references missing animal "
            f"{self.missing_key or '(none)'}: {self.description}"
        )


class GenericFinding(FindingBase):
    """Free-form finding produced by custom rules."""

    kind: Literal["generic"] = "generic"
    message: str
    values: Dict[str, Any] = Field(default_factory=ReadOnlyDict)

    @field_validator("values", mode="after")
    @classmethod
    def freeze_values(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return ReadOnlyDict(value)

    def summary(self) -> str:
        return self.message


Finding = Annotated[
    Union[
        MissingFieldsFinding,
        DuplicateKeyFinding,
        DateRangeFinding,
        StalenessFinding,
        OverdueFinding,
        MissingDocumentationFinding,
        IntervalGapFinding,
        OrphanedReferenceFinding,
        GenericFinding,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Run results
# ---------------------------------------------------------------------------


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_name: str
    description: str
    severity: Severity
    count: int
    findings: Tuple[Finding, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def details_text(self, separator: str = ", ") -> str:
        if not self.findings:
            return "No details available"
        return separator.join(f.summary() for f in self.findings)


class CategoryResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    issues: Tuple[Issue, ...] = ()
    passed_rule_count: int = 0
    failed_rule_count: int = 0


class HealthSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_issues: int = 0
    critical_issues: int = 0
    high_issues: int = 0
    medium_issues: int = 0
    low_issues: int = 0
    info_issues: int = 0

    def count_for(self, severity: Severity) -> int:
        return getattr(self, severity.summary_field)


class HealthCheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_id: str
    timestamp: datetime
    duration_ms: float = 0.0
    categories: Dict[str, CategoryResult] = Field(default_factory=ReadOnlyDict)
    summary: HealthSummary = Field(default_factory=HealthSummary)
    recommendations: Tuple[str, ...] = ()

    @field_validator("categories", mode="after")
    @classmethod
    def freeze_categories(cls, value: Dict[str, CategoryResult]) -> Dict[str, CategoryResult]:
        return ReadOnlyDict(value)

    def iter_issues(self) -> Iterator[Tuple[str, CategoryResult, Issue]]:
        for category_id, category in self.categories.items():
            for issue in category.issues:
                yield category_id, category, issue

    @property
    def has_issues(self) -> bool:
        return self.summary.total_issues > 0


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    summary: HealthSummary
    duration_ms: float = 0.0

    @classmethod
    def from_result(cls, result: HealthCheckResult) -> "HistoryEntry":
        return cls(timestamp=result.timestamp, summary=result.summary, duration_ms=result.duration_ms)
