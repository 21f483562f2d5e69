"""Periodic task scheduler driven by a 100 kHz tick counter."""

import time
from dataclasses import dataclass
from typing import Callable

MAX_TASKS = 4
TICKS_PER_MS = 100


class SchedulerFullError(RuntimeError):
    """Raised when more than MAX_TASKS tasks are added."""


def _default_clock():
    return time.perf_counter_ns() // 10_000


@dataclass
class _Task:
    function: Callable[[], None]
    period: int
    deadline: int
    exec_ticks: int = 0


class Scheduler:
    """Runs up to four periodic tasks; ``clock()`` returns ticks at 100 kHz."""

    def __init__(self, clock=None):
        self._clock = clock if clock is not None else _default_clock
        self._tasks = []

    def add_task(self, function, period):
        """Add ``function`` to be called every ``period`` milliseconds.

        The task becomes due immediately.
        """
        if len(self._tasks) >= MAX_TASKS:
            raise SchedulerFullError(f"at most {MAX_TASKS} tasks can be scheduled")
        ticks = int(period) * TICKS_PER_MS
        if ticks <= 0:
            raise ValueError("task period must be positive")
        self._tasks.append(_Task(function, ticks, self._clock()))

    def run(self):
        """Call every task that is due, once, in the order they were added."""
        now = self._clock()
        for task in self._tasks:
            if now >= task.deadline:
                task.deadline += task.period
                start = self._clock()
                task.function()
                task.exec_ticks = self._clock() - start

    def cpu_load(self):
        """CPU load caused by the tasks in units of 0.1 %."""
        return sum((10 * task.exec_ticks) // task.period for task in self._tasks)