"""
Task Manager: a single-user, in-memory task list.

The core (TaskStore plus the pure projections) has no I/O of its own; the
FastAPI app in task_manager.main exposes it to a presentation front end.
"""

from .errors import InvalidStateError, TaskNotFoundError, TaskStoreError, TaskValidationError
from .models import IDLE, Counts, Editing, EmptyStateReason, Idle, Task, TaskFilter, TaskView
from .store import TaskStore

__all__ = [
    "IDLE",
    "Counts",
    "Editing",
    "EmptyStateReason",
    "Idle",
    "InvalidStateError",
    "Task",
    "TaskFilter",
    "TaskNotFoundError",
    "TaskStore",
    "TaskStoreError",
    "TaskValidationError",
    "TaskView",
]
