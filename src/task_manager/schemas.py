from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import Counts, EditSession, Editing, EmptyStateReason, Task, TaskView


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for adding a task.

    Text is passed to the store untouched; the store trims it and rejects blank
    input with a ValidationError envelope.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy milk"}})

    text: str = Field(..., description="Task text; surrounding whitespace is trimmed")


# PUBLIC_INTERFACE
class EditBegin(BaseModel):
    """Schema for opening an edit session on a task."""

    model_config = ConfigDict(json_schema_extra={"example": {"task_id": 1}})

    task_id: int = Field(..., description="Id of the task to rename")


# PUBLIC_INTERFACE
class DraftUpdate(BaseModel):
    """
    Schema for replacing the edit draft. The text is stored verbatim and only
    trimmed on commit.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy oat milk "}})

    text: str = Field(..., description="New draft text (not trimmed)")


# PUBLIC_INTERFACE
class FilterUpdate(BaseModel):
    """Schema for switching the view filter."""

    model_config = ConfigDict(json_schema_extra={"example": {"filter": "active"}})

    filter: str = Field(..., description="One of: all, active, completed")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 3,
                "text": "Buy milk",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456+00:00",
                "updated_at": None,
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Task text")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(
        default=None, description="Time of the last toggle or text edit; null if never changed"
    )

    @classmethod
    def from_task(cls, task: Task) -> TaskOut:
        return cls.model_validate(task)


class CountsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int = Field(..., description="Number of tasks")
    active: int = Field(..., description="Number of incomplete tasks")
    completed: int = Field(..., description="Number of completed tasks")

    @classmethod
    def from_counts(cls, counts: Counts) -> CountsOut:
        return cls.model_validate(counts)


# PUBLIC_INTERFACE
class EditSessionOut(BaseModel):
    """
    Current edit session. `task_id` and `draft` are both null when idle and both
    set while editing.
    """

    editing: bool = Field(..., description="True while a task is being edited")
    task_id: Optional[int] = Field(default=None, description="Task under edit")
    draft: Optional[str] = Field(default=None, description="In-progress draft text")

    @classmethod
    def from_session(cls, session: EditSession) -> EditSessionOut:
        if isinstance(session, Editing):
            return cls(editing=True, task_id=session.task_id, draft=session.draft)
        return cls(editing=False)


class EmptyStateOut(BaseModel):
    reason: str = Field(..., description="Why the filtered view is empty")
    message: str = Field(..., description="Display text for the empty state")

    @classmethod
    def from_reason(cls, reason: EmptyStateReason) -> EmptyStateOut:
        return cls(reason=reason.value, message=reason.message)


class FilterOut(BaseModel):
    filter: str = Field(..., description="Active filter: all, active or completed")


class ClearCompletedOut(BaseModel):
    removed: int = Field(..., description="Number of completed tasks removed")


# PUBLIC_INTERFACE
class TaskViewOut(BaseModel):
    """
    Full view model for the presentation layer: visible items, counts, filter,
    edit session and empty-state hint.
    """

    items: List[TaskOut] = Field(..., description="Tasks visible under the current filter, newest first")
    counts: CountsOut
    filter: str = Field(..., description="Active filter")
    edit_session: EditSessionOut
    empty_state: Optional[EmptyStateOut] = Field(
        default=None, description="Present only when no items are visible"
    )

    @classmethod
    def from_view(cls, view: TaskView) -> TaskViewOut:
        return cls(
            items=[TaskOut.from_task(t) for t in view.items],
            counts=CountsOut.from_counts(view.counts),
            filter=view.filter.value,
            edit_session=EditSessionOut.from_session(view.edit_session),
            empty_state=EmptyStateOut.from_reason(view.empty_state) if view.empty_state else None,
        )


class ErrorOut(BaseModel):
    """Error envelope returned for every rejected request."""

    error: str = Field(..., description="Error code: ValidationError, NotFound or InvalidState")
    message: str = Field(..., description="Human readable message")
    detail: Optional[Any] = Field(default=None, description="Extra context, if any")
