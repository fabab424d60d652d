"""
Pure projections from (tasks, filter) to what the presentation layer shows.

Nothing here mutates its inputs; callers may pass the store's own tuple.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .models import Counts, EmptyStateReason, Task, TaskFilter


# PUBLIC_INTERFACE
def compute_filtered_view(tasks: Sequence[Task], task_filter: TaskFilter) -> Tuple[Task, ...]:
    """
    Return the tasks visible under `task_filter`, preserving source order.

    - all: every task
    - active: tasks with completed=False
    - completed: tasks with completed=True
    """
    if task_filter is TaskFilter.ACTIVE:
        return tuple(t for t in tasks if not t.completed)
    if task_filter is TaskFilter.COMPLETED:
        return tuple(t for t in tasks if t.completed)
    return tuple(tasks)


# PUBLIC_INTERFACE
def compute_counts(tasks: Sequence[Task]) -> Counts:
    """Return total/active/completed counts over the whole list."""
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return Counts(total=total, active=total - completed, completed=completed)


# PUBLIC_INTERFACE
def empty_state_reason(tasks: Sequence[Task], task_filter: TaskFilter) -> Optional[EmptyStateReason]:
    """
    Classify why the filtered view is empty, or return None if it is not.

    An empty list always reports NO_TASKS regardless of filter.
    """
    if compute_filtered_view(tasks, task_filter):
        return None
    if not tasks:
        return EmptyStateReason.NO_TASKS
    if task_filter is TaskFilter.ACTIVE:
        return EmptyStateReason.NO_ACTIVE_TASKS
    if task_filter is TaskFilter.COMPLETED:
        return EmptyStateReason.NO_COMPLETED_TASKS
    # unreachable with a non-empty list under ALL
    return EmptyStateReason.NO_MATCHING_TASKS
