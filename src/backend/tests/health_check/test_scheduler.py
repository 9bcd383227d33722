import threading

import pytest

from common.health_check.scheduler import HealthCheckScheduler


def test_tick_runs_job_and_records_status(fixed_clock):
    calls = []
    scheduler = HealthCheckScheduler(lambda: calls.append("run"), clock=fixed_clock)

    assert scheduler.tick() is True

    status = scheduler.get_status()
    assert calls == ["run"]
    assert status["last_run_status"] == "ok"
    assert status["last_run_at"] == fixed_clock().isoformat()
    assert status["skipped_runs"] == 0


def test_tick_skips_when_guard_is_held(fixed_clock):
    guard = threading.Lock()
    calls = []
    scheduler = HealthCheckScheduler(lambda: calls.append("run"), guard=guard, clock=fixed_clock)

    with guard:
        assert scheduler.tick() is False

    assert calls == []
    assert scheduler.get_status()["skipped_runs"] == 1
    assert scheduler.tick() is True


def test_tick_records_job_errors_and_releases_guard(fixed_clock):
    guard = threading.Lock()

    def _fail():
        raise RuntimeError("data source offline")

    scheduler = HealthCheckScheduler(_fail, guard=guard, clock=fixed_clock)

    assert scheduler.tick() is True
    status = scheduler.get_status()
    assert status["last_run_status"] == "error"
    assert status["last_error"] == "data source offline"
    assert not guard.locked()


def test_start_replaces_previous_schedule_and_stop_cancels(fixed_clock):
    scheduler = HealthCheckScheduler(lambda: None, clock=fixed_clock)

    scheduler.start(24)
    first = scheduler._thread
    scheduler.start(12)
    second = scheduler._thread

    assert first is not second
    assert scheduler.is_running
    status = scheduler.get_status()
    assert status["enabled"] is True
    assert status["interval_hours"] == 12

    scheduler.stop()
    first.join(timeout=1)
    second.join(timeout=1)

    assert not scheduler.is_running
    assert not first.is_alive()
    assert not second.is_alive()
    assert scheduler.get_status()["enabled"] is False
    assert scheduler.get_status()["next_run_at"] is None


def test_loop_ticks_on_interval():
    ran = threading.Event()
    scheduler = HealthCheckScheduler(ran.set)

    scheduler.start(0.2 / 3600)
    try:
        assert ran.wait(timeout=5)
    finally:
        scheduler.stop()


def test_stop_without_start_is_harmless():
    scheduler = HealthCheckScheduler(lambda: None)

    scheduler.stop()

    assert not scheduler.is_running


@pytest.mark.parametrize("interval", [0, -1])
def test_start_rejects_non_positive_interval(interval):
    scheduler = HealthCheckScheduler(lambda: None)

    with pytest.raises(ValueError):
        scheduler.start(interval)
    assert not scheduler.is_running


def test_stop_during_run_lets_it_finish():
    started = threading.Event()
    release = threading.Event()
    finished = []

    def _job():
        started.set()
        release.wait(timeout=5)
        finished.append(True)

    scheduler = HealthCheckScheduler(_job)
    worker = threading.Thread(target=scheduler.tick)
    worker.start()
    assert started.wait(timeout=5)

    scheduler.stop()
    release.set()
    worker.join(timeout=5)

    assert finished == [True]


def test_on_result_runs_after_guard_is_released(fixed_clock):
    guard = threading.Lock()
    observed = []

    def _on_result(value):
        observed.append((value, guard.locked()))

    scheduler = HealthCheckScheduler(lambda: "done", guard=guard, on_result=_on_result, clock=fixed_clock)

    scheduler.tick()

    assert observed == [("done", False)]


def test_on_result_skipped_when_job_fails(fixed_clock):
    observed = []

    def _fail():
        raise RuntimeError("boom")

    scheduler = HealthCheckScheduler(_fail, on_result=observed.append, clock=fixed_clock)

    scheduler.tick()

    assert observed == []


def test_on_result_errors_are_logged(fixed_clock, caplog):
    def _broken(value):
        raise RuntimeError("handler bug")

    scheduler = HealthCheckScheduler(lambda: 1, on_result=_broken, clock=fixed_clock)

    with caplog.at_level("ERROR"):
        assert scheduler.tick() is True

    assert "result handler failed" in caplog.text
    assert scheduler.get_status()["last_run_status"] == "ok"
