from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import TaskValidationError


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Task:
    """
    A single task item.

    Fields:
    - id: Unique integer identifier, assigned by the store and never reused
    - text: Non-empty trimmed display text
    - completed: Completion flag (False at creation)
    - created_at: Creation timestamp, set once
    - updated_at: None until the first toggle or text edit, then the time of the latest one
    """

    id: int
    text: str
    created_at: datetime
    completed: bool = False
    updated_at: Optional[datetime] = None


# PUBLIC_INTERFACE
class TaskFilter(str, Enum):
    """View selector controlling which tasks are displayed."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Union[TaskFilter, str]) -> TaskFilter:
        """
        Accept a TaskFilter or its (case-insensitive) string value.

        Raises:
            TaskValidationError if the value names no known filter.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(f.value for f in cls)
            raise TaskValidationError(
                f"Unknown filter {value!r}; expected one of: {allowed}",
                detail={"filter": value},
            ) from None


@dataclass(frozen=True)
class Idle:
    """No task is being edited."""


@dataclass(frozen=True)
class Editing:
    """A task is being renamed; `draft` holds the in-progress text verbatim."""

    task_id: int
    draft: str


# Edit session is exactly one of the two states; a draft cannot exist without a target.
EditSession = Union[Idle, Editing]
IDLE = Idle()


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Counts:
    """Summary counts; active + completed == total always holds."""

    total: int
    active: int
    completed: int


# PUBLIC_INTERFACE
class EmptyStateReason(str, Enum):
    """Why the filtered view is empty. Advisory only, used for display text."""

    NO_TASKS = "no_tasks"
    NO_ACTIVE_TASKS = "no_active_tasks"
    NO_COMPLETED_TASKS = "no_completed_tasks"
    NO_MATCHING_TASKS = "no_matching_tasks"

    @property
    def message(self) -> str:
        return _EMPTY_STATE_MESSAGES[self]


_EMPTY_STATE_MESSAGES = {
    EmptyStateReason.NO_TASKS: "No tasks yet. Add your first task above.",
    EmptyStateReason.NO_ACTIVE_TASKS: "You are all caught up! No active tasks.",
    EmptyStateReason.NO_COMPLETED_TASKS: "No tasks have been completed yet.",
    EmptyStateReason.NO_MATCHING_TASKS: "No tasks match the current criteria.",
}


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskView:
    """
    Immutable view model handed to the presentation layer.

    Fields:
    - items: Tasks visible under the current filter, newest first
    - counts: Counts over the full list (not just the visible items)
    - filter: The active filter
    - edit_session: Idle or Editing(task_id, draft)
    - empty_state: Reason the view is empty, or None when items are shown
    """

    items: Tuple[Task, ...]
    counts: Counts
    filter: TaskFilter
    edit_session: EditSession
    empty_state: Optional[EmptyStateReason]
