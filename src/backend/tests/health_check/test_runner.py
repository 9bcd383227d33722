import copy
import time
from datetime import timedelta

import pytest
from pydantic import ValidationError

from common.health_check.config import HealthCheckConfig
from common.health_check.models import Category, GenericFinding, HealthCheckResult, Severity
from common.health_check.recommendations import (
    CRITICAL_RECOMMENDATION,
    GENERIC_RECOMMENDATION,
    HIGH_VOLUME_RECOMMENDATION,
    PERIODIC_CHECK_RECOMMENDATION,
    TOTAL_VOLUME_RECOMMENDATION,
    TRAINING_RECOMMENDATION,
)
from common.health_check.registry import RuleRegistry
from common.health_check.runner import HealthCheckRunner, normalize_findings


@pytest.fixture
def messy_snapshot(make_snapshot, make_animal, make_health_record, make_breeding_record, make_transaction, make_feed_record, today):
    animals = [
        make_animal(id="g1", ear_tag="A1"),
        make_animal(id="g2", ear_tag="A1", breed=None),
        make_animal(id="g3", date_of_birth=today + timedelta(days=3)),
    ]
    return make_snapshot(
        animals=animals,
        health_records=[
            make_health_record(animal_id="g1", follow_up_date=today - timedelta(days=2)),
            make_health_record(animal_id="ghost"),
        ],
        breeding_records=[make_breeding_record(doe_id="g1", status="pregnant", breeding_date=today - timedelta(days=151))],
        transactions=[make_transaction(amount="5000")],
        feed_records=[make_feed_record(date=today - timedelta(days=10)), make_feed_record(date=today)],
    )


def test_every_category_is_reported_even_when_clean(make_snapshot, fixed_clock):
    result = HealthCheckRunner(clock=fixed_clock).run(make_snapshot())

    assert list(result.categories) == [c.value for c in Category]
    assert result.categories["animals"].name == "Animal Records"
    assert result.summary.total_issues == 0
    assert not result.has_issues
    assert result.recommendations == (PERIODIC_CHECK_RECOMMENDATION, TRAINING_RECOMMENDATION)


def test_counts_are_consistent(messy_snapshot, fixed_clock):
    runner = HealthCheckRunner(clock=fixed_clock)
    result = runner.run(messy_snapshot)

    for category_id, category in result.categories.items():
        registered = dict(runner.registry.items())[category_id]
        assert category.passed_rule_count + category.failed_rule_count == len(registered)
        assert category.failed_rule_count == len(category.issues)

    issues = [issue for _, _, issue in result.iter_issues()]
    assert all(issue.count == len(issue.findings) and issue.count > 0 for issue in issues)
    assert result.summary.total_issues == sum(issue.count for issue in issues)
    assert result.summary.total_issues == sum(result.summary.count_for(s) for s in Severity)


def test_messy_snapshot_findings_by_rule(messy_snapshot, fixed_clock):
    result = HealthCheckRunner(clock=fixed_clock).run(messy_snapshot)

    counts = {(cid, issue.rule_name): issue.count for cid, _, issue in result.iter_issues()}
    assert counts[("animals", "duplicate_ear_tags")] == 1
    assert counts[("animals", "missing_required_fields")] == 1
    assert counts[("animals", "age_validation")] == 1
    assert counts[("health", "expired_treatments")] == 1
    assert counts[("breeding", "pregnancy_tracking")] == 1
    assert counts[("financial", "missing_receipts")] == 1
    assert counts[("feed", "irregular_feeding")] == 1
    assert counts[("integrity", "orphaned_records")] == 1
    assert result.summary.critical_issues == 2
    assert result.recommendations[0] == CRITICAL_RECOMMENDATION


def test_runs_are_deterministic_apart_from_identity(messy_snapshot, fixed_clock):
    runner = HealthCheckRunner(clock=fixed_clock)

    first = runner.run(messy_snapshot)
    second = runner.run(messy_snapshot)

    assert first.run_id != second.run_id
    assert first.categories == second.categories
    assert first.summary == second.summary
    assert first.recommendations == second.recommendations


def test_failing_rule_is_isolated(make_snapshot, fixed_clock, caplog):
    registry = RuleRegistry.with_builtin_rules()

    def _boom(data):
        raise RuntimeError("kaboom")

    registry.add("animals", "exploding", {"description": "Explodes", "severity": "high", "check": _boom})

    with caplog.at_level("ERROR"):
        result = HealthCheckRunner(registry, clock=fixed_clock).run(make_snapshot())

    animals = result.categories["animals"]
    assert animals.failed_rule_count == 0
    assert animals.passed_rule_count == 4
    assert "Validation rule animals.exploding failed: kaboom" in caplog.text


def test_slow_rule_times_out(make_snapshot, fixed_clock):
    registry = RuleRegistry()

    def _slow(data):
        time.sleep(1)
        return ["late"]

    registry.add("custom", "slow", {"description": "Slow", "severity": "low", "check": _slow})
    runner = HealthCheckRunner(registry, config=HealthCheckConfig(rule_timeout_seconds=0.05), clock=fixed_clock)

    result = runner.run(make_snapshot())

    assert result.categories["custom"].issues == ()
    assert result.categories["custom"].passed_rule_count == 1


def test_custom_rule_receives_full_snapshot_and_free_form_findings(make_snapshot, make_animal, fixed_clock):
    registry = RuleRegistry()
    seen = []

    def _check(data):
        seen.append(data)
        return ["plain message", {"name": "Daisy", "ear_tag": "D1"}, {"id": "x1", "description": "odd"}]

    registry.add("custom", "free_form", {"description": "Free-form", "severity": "info", "check": _check})
    snapshot = make_snapshot(animals=[make_animal()])

    result = HealthCheckRunner(registry, clock=fixed_clock).run(snapshot)

    assert seen == [snapshot]
    (issue,) = result.categories["custom"].issues
    assert issue.severity == Severity.INFO
    assert issue.recommendations == (GENERIC_RECOMMENDATION,)
    assert [f.summary() for f in issue.findings] == ["plain message", "Daisy (D1)", "ID: x1 - odd"]
    assert result.categories["custom"].name == "Custom"
    assert result.summary.info_issues == 3


def test_disabled_rule_counts_as_passed(messy_snapshot, fixed_clock):
    config = HealthCheckConfig(rules={"duplicate_ear_tags": {"enabled": False}})

    result = HealthCheckRunner(config=config, clock=fixed_clock).run(messy_snapshot)

    rule_names = [issue.rule_name for issue in result.categories["animals"].issues]
    assert "duplicate_ear_tags" not in rule_names
    assert result.summary.critical_issues == 1


def test_volume_recommendations_use_thresholds(make_snapshot, make_animal, fixed_clock):
    animals = [make_animal(breed=None) for _ in range(3)]
    config = HealthCheckConfig(high_issue_threshold=2, total_issue_threshold=2)

    result = HealthCheckRunner(config=config, clock=fixed_clock).run(make_snapshot(animals=animals))

    assert HIGH_VOLUME_RECOMMENDATION in result.recommendations
    assert TOTAL_VOLUME_RECOMMENDATION in result.recommendations
    assert CRITICAL_RECOMMENDATION not in result.recommendations


def test_normalize_findings_wraps_single_values():
    assert normalize_findings(None) == []
    assert normalize_findings("one") == [GenericFinding(message="one")]
    (finding,) = normalize_findings({"a": 1})
    assert finding.values == {"a": 1}
    assert finding.message == '{"a": 1}'


def test_custom_health_rule_may_take_records_and_animals(make_snapshot, make_animal, make_health_record, fixed_clock):
    registry = RuleRegistry()

    def _untreated(health_records, animals):
        treated = {r.animal_id for r in health_records}
        return [f"{a.name} has no health record" for a in animals if a.id not in treated]

    registry.add("health", "untreated", {"description": "Untreated animals", "severity": "medium", "check": _untreated})
    snapshot = make_snapshot(
        animals=[make_animal(id="g1"), make_animal(id="g2", name="Clover")],
        health_records=[make_health_record(animal_id="g1")],
    )

    result = HealthCheckRunner(registry, clock=fixed_clock).run(snapshot)

    (issue,) = result.categories["health"].issues
    assert [f.summary() for f in issue.findings] == ["Clover has no health record"]
    assert result.categories["health"].passed_rule_count == 0


def test_single_argument_health_rule_receives_the_slice(make_snapshot, make_health_record, fixed_clock):
    registry = RuleRegistry()
    seen = []

    def _check(data, extra=None):
        seen.append(data)
        return []

    registry.add("health", "inspect", {"description": "Inspect", "severity": "info", "check": _check})
    snapshot = make_snapshot(health_records=[make_health_record()])

    HealthCheckRunner(registry, clock=fixed_clock).run(snapshot)

    (data,) = seen
    assert data.health_records == snapshot.health_records
    assert data.animals == ()


def test_result_cannot_be_changed_in_place(messy_snapshot, fixed_clock):
    result = HealthCheckRunner(clock=fixed_clock).run(messy_snapshot)
    before = result.model_dump(mode="json")
    animals = result.categories["animals"]

    with pytest.raises(AttributeError):
        result.recommendations.append("injected")
    with pytest.raises(AttributeError):
        animals.issues.clear()
    with pytest.raises(TypeError):
        result.categories.clear()
    with pytest.raises(TypeError):
        result.categories["pasture"] = animals
    with pytest.raises(AttributeError):
        animals.issues[0].findings[0].missing.append("name")
    with pytest.raises(ValidationError):
        animals.issues[0].findings[0].entity_id = "other"
    with pytest.raises(ValidationError):
        result.summary.total_issues = 0

    assert result.model_dump(mode="json") == before


def test_result_copies_and_round_trips_keep_read_only_categories(messy_snapshot, fixed_clock):
    result = HealthCheckRunner(clock=fixed_clock).run(messy_snapshot)

    copied = copy.deepcopy(result)
    parsed = HealthCheckResult.model_validate(result.model_dump(mode="json"))

    assert copied == result
    assert parsed == result
    with pytest.raises(TypeError):
        parsed.categories.pop("animals")
