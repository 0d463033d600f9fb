"""
Progress and points derived from a checklist.

Everything here is a pure function of the task list; nothing is cached.
"""
from typing import Iterable, List, NamedTuple

COMPLETION_BONUS = 20
POINTS_PER_TASK = 10

# (threshold pct, badge) pairs, lowest first
BADGES = (
    (30, 'Starter'),
    (60, 'Optimiser'),
    (100, 'All Clear'),
)


class Completion(NamedTuple):
    done: int
    total: int
    pct: int


def round_pct(done: int, total: int) -> int:
    """
    ``done / total * 100`` rounded to the nearest integer, halves rounded up.

    Integer arithmetic keeps ties exact: 1 of 8 is 12.5% and gives 13.
    """
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def compute_completion(tasks: Iterable) -> Completion:
    tasks = list(tasks)
    done = sum(1 for task in tasks if task.done)
    total = len(tasks)
    return Completion(done=done, total=total, pct=round_pct(done, total))


def compute_points(completion: Completion) -> int:
    bonus = COMPLETION_BONUS if completion.pct == 100 else 0
    return completion.done * POINTS_PER_TASK + bonus


def earned_badges(completion: Completion) -> List[str]:
    return [name for threshold, name in BADGES if completion.pct >= threshold]
