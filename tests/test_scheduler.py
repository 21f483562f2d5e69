import pytest

from pcsctl.scheduler import MAX_TASKS, TICKS_PER_MS, Scheduler, SchedulerFullError


class FakeClock:
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


def test_task_runs_immediately_then_periodically():
    clock = FakeClock()
    scheduler = Scheduler(clock)
    calls = []
    scheduler.add_task(lambda: calls.append(clock.now), 10)

    scheduler.run()
    assert calls == [0]
    scheduler.run()
    assert calls == [0]

    clock.now = 10 * TICKS_PER_MS - 1
    scheduler.run()
    assert len(calls) == 1

    clock.now = 10 * TICKS_PER_MS
    scheduler.run()
    assert calls == [0, 10 * TICKS_PER_MS]


def test_tasks_run_in_order_added():
    clock = FakeClock()
    scheduler = Scheduler(clock)
    order = []
    scheduler.add_task(lambda: order.append("a"), 1)
    scheduler.add_task(lambda: order.append("b"), 1)
    scheduler.run()
    assert order == ["a", "b"]


def test_too_many_tasks():
    scheduler = Scheduler(FakeClock())
    for _ in range(MAX_TASKS):
        scheduler.add_task(lambda: None, 1)
    with pytest.raises(SchedulerFullError):
        scheduler.add_task(lambda: None, 1)


def test_non_positive_period_rejected():
    scheduler = Scheduler(FakeClock())
    with pytest.raises(ValueError):
        scheduler.add_task(lambda: None, 0)


def test_cpu_load_zero_for_instant_tasks():
    scheduler = Scheduler(FakeClock())
    scheduler.add_task(lambda: None, 10)
    scheduler.run()
    assert scheduler.cpu_load() == 0


def test_cpu_load_full_period():
    clock = FakeClock()
    scheduler = Scheduler(clock)
    period_ms = 10

    def busy():
        clock.now += period_ms * TICKS_PER_MS

    scheduler.add_task(busy, period_ms)
    scheduler.run()
    assert scheduler.cpu_load() == 10


def test_default_clock_runs_task():
    scheduler = Scheduler()
    calls = []
    scheduler.add_task(lambda: calls.append(1), 1000)
    scheduler.run()
    assert calls == [1]
    assert scheduler.cpu_load() >= 0