from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_store
from ..schemas import DraftUpdate, EditBegin, EditSessionOut, ErrorOut, TaskOut
from ..store import TaskStore

router = APIRouter(
    prefix="/api/v1/edit-session",
    tags=["edit-session"],
)

_NO_SESSION = {409: {"model": ErrorOut, "description": "No task is being edited"}}


# PUBLIC_INTERFACE
@router.get("", response_model=EditSessionOut, summary="Get Edit Session")
def get_edit_session(store: TaskStore = Depends(get_store)) -> EditSessionOut:
    return EditSessionOut.from_session(store.edit_session)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=EditSessionOut,
    summary="Begin Edit",
    description=(
        "Start renaming a task. The draft is seeded with the task's current text. "
        "Any edit already in progress is abandoned."
    ),
    responses={
        404: {"model": ErrorOut, "description": "Task not found"},
        409: {"model": ErrorOut, "description": "Task is completed and cannot be edited"},
    },
)
def begin_edit(payload: EditBegin, store: TaskStore = Depends(get_store)) -> EditSessionOut:
    return EditSessionOut.from_session(store.begin_edit(payload.task_id))


# PUBLIC_INTERFACE
@router.put(
    "/draft",
    response_model=EditSessionOut,
    summary="Update Draft",
    description="Replace the draft text verbatim. Trimming happens on commit.",
    responses=_NO_SESSION,
)
def update_draft(payload: DraftUpdate, store: TaskStore = Depends(get_store)) -> EditSessionOut:
    return EditSessionOut.from_session(store.update_draft(payload.text))


# PUBLIC_INTERFACE
@router.post(
    "/commit",
    response_model=TaskOut,
    summary="Commit Edit",
    description=(
        "Trim the draft and apply it to the task. A blank draft is rejected with "
        "422 and the session stays open."
    ),
    responses={
        **_NO_SESSION,
        422: {"model": ErrorOut, "description": "Draft is empty or whitespace only"},
    },
)
def commit_edit(store: TaskStore = Depends(get_store)) -> TaskOut:
    return TaskOut.from_task(store.commit_edit())


# PUBLIC_INTERFACE
@router.delete(
    "",
    response_model=EditSessionOut,
    summary="Cancel Edit",
    description="Discard the draft and close the session. Succeeds even when no edit is active.",
)
def cancel_edit(store: TaskStore = Depends(get_store)) -> EditSessionOut:
    store.cancel_edit()
    return EditSessionOut.from_session(store.edit_session)
