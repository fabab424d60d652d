from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import get_store
from ..errors import TaskNotFoundError
from ..schemas import ClearCompletedOut, ErrorOut, TaskCreate, TaskOut
from ..store import TaskStore

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Tasks visible under the current filter, newest first.",
)
def list_tasks(store: TaskStore = Depends(get_store)) -> List[TaskOut]:
    return [TaskOut.from_task(t) for t in store.filtered_view()]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add Task",
    description="Trim the text and add a new task at the top of the list.",
    responses={
        201: {"description": "Task created"},
        422: {"model": ErrorOut, "description": "Text is empty or whitespace only"},
    },
)
def add_task(payload: TaskCreate, store: TaskStore = Depends(get_store)) -> TaskOut:
    """
    Add a task. Blank text is rejected and the list is left unchanged.
    """
    return TaskOut.from_task(store.add(payload.text))


# PUBLIC_INTERFACE
@router.delete(
    "/completed",
    response_model=ClearCompletedOut,
    summary="Clear Completed",
    description="Remove every completed task, keeping the order of the rest.",
)
def clear_completed(store: TaskStore = Depends(get_store)) -> ClearCompletedOut:
    return ClearCompletedOut(removed=store.clear_completed())


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={404: {"model": ErrorOut, "description": "Task not found"}},
)
def get_task(task_id: int, store: TaskStore = Depends(get_store)) -> TaskOut:
    task = store.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return TaskOut.from_task(task)


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskOut,
    summary="Toggle Task",
    description=(
        "Flip the completion flag. Completing the task that is being edited "
        "cancels the edit session."
    ),
    responses={404: {"model": ErrorOut, "description": "Task not found"}},
)
def toggle_task(task_id: int, store: TaskStore = Depends(get_store)) -> TaskOut:
    return TaskOut.from_task(store.toggle(task_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task by id. Deleting the task under edit closes the edit session.",
    responses={
        204: {"description": "Task deleted"},
        404: {"model": ErrorOut, "description": "Task not found"},
    },
)
def delete_task(task_id: int, store: TaskStore = Depends(get_store)) -> Response:
    """
    Returns 204 on success. The store treats a missing id as a no-op; the API
    reports it as 404 so clients can tell the two apart.
    """
    if not store.delete(task_id):
        raise TaskNotFoundError(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
