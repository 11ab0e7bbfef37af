from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class TaskOutcome:
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _settle(task: Callable[[], Any]) -> TaskOutcome:
    try:
        return TaskOutcome(value=task())
    except Exception as exc:
        return TaskOutcome(error=exc)


def run_indexed_tasks_settled(
    tasks: list[tuple[int, Callable[[], Any]]],
    *,
    max_workers: int,
) -> list[tuple[int, TaskOutcome]]:
    """Run every task and return only once all of them have settled.

    A failing task is recorded in its outcome; siblings keep running.
    Results come back sorted by index.
    """
    if not tasks:
        return []
    if max_workers <= 1 or len(tasks) == 1:
        return [(index, _settle(task)) for index, task in tasks]

    results: dict[int, TaskOutcome] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(copy_context().run, _settle, task): index
            for index, task in tasks
        }
        for future in as_completed(future_to_index):
            results[future_to_index[future]] = future.result()

    return [(index, results[index]) for index in sorted(results)]


def raise_first_failure(outcomes: list[tuple[int, TaskOutcome]]) -> None:
    failures = [(index, outcome.error) for index, outcome in outcomes if not outcome.ok]
    if not failures:
        return
    for index, error in failures[1:]:
        logger.error("task %d failed: %s", index, error)
    raise failures[0][1]
