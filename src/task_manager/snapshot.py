"""
Serialization boundary for the task list and filter.

A snapshot is plain JSON-compatible data:

    {"version": 1, "filter": "all", "next_id": 3, "tasks": [{"id": 2, "text": "...", ...}, ...]}

Tasks are listed newest first with ISO-8601 timestamps. `next_id` keeps ids of
deleted tasks from being reused after a restore; it is optional on load. The
edit session is transient UI state and is never part of a snapshot; a restored
store starts idle.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import TaskValidationError
from .models import Task, TaskFilter
from .store import Clock, TaskStore

SNAPSHOT_VERSION = 1


class TaskRecord(BaseModel):
    id: int = Field(..., ge=1)
    text: str
    completed: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("text must not be empty")
        return s


class StoreSnapshot(BaseModel):
    version: int = SNAPSHOT_VERSION
    filter: TaskFilter = TaskFilter.ALL
    next_id: Optional[int] = Field(default=None, ge=1)
    tasks: List[TaskRecord] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {v}")
        return v


# PUBLIC_INTERFACE
def dump_snapshot(store: TaskStore) -> Dict[str, Any]:
    """Serialize the store's task list (newest first) and filter."""
    snapshot = StoreSnapshot(
        filter=store.filter,
        next_id=store.next_id,
        tasks=[
            TaskRecord(
                id=t.id,
                text=t.text,
                completed=t.completed,
                created_at=t.created_at,
                updated_at=t.updated_at,
            )
            for t in store.tasks()
        ],
    )
    return snapshot.model_dump(mode="json")


# PUBLIC_INTERFACE
def load_snapshot(data: Mapping[str, Any], clock: Optional[Clock] = None) -> TaskStore:
    """
    Rebuild a TaskStore from snapshot data.

    Raises:
        TaskValidationError if the data is malformed, has blank task text,
        repeats an id, or declares an unsupported version.
    """
    try:
        snapshot = StoreSnapshot.model_validate(data)
    except ValidationError as exc:
        raise TaskValidationError(
            "Invalid snapshot", detail=exc.errors(include_url=False, include_context=False)
        ) from exc
    tasks = [
        Task(
            id=r.id,
            text=r.text,
            completed=r.completed,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )
        for r in snapshot.tasks
    ]
    return TaskStore.from_tasks(
        tasks, task_filter=snapshot.filter, clock=clock, next_id=snapshot.next_id
    )
