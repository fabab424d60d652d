from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .errors import InvalidStateError, TaskNotFoundError, TaskStoreError, TaskValidationError
from .models import IDLE, Counts, EditSession, Editing, EmptyStateReason, Task, TaskFilter, TaskView
from .projection import compute_counts, compute_filtered_view, empty_state_reason

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Listener = Callable[[TaskView], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class TaskStore:
    """
    Authoritative in-memory task list with a single edit-session slot and filter.

    Commands run to completion under a re-entrant lock, so the state observed
    between commands is always consistent even when the HTTP adapter dispatches
    from worker threads. Rejected commands raise a TaskStoreError subclass and
    leave state untouched (a failed commit keeps its session open).

    Tasks are kept in an id-keyed dict in creation order; the public list is
    that order reversed (newest first).
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        *,
        initial_filter: Union[TaskFilter, str] = TaskFilter.ALL,
        start_id: int = 1,
    ) -> None:
        self._lock = RLock()
        self._clock: Clock = clock or utc_now
        self._items: Dict[int, Task] = {}
        self._next_id = start_id
        self._filter = TaskFilter.parse(initial_filter)
        self._session: EditSession = IDLE
        self._listeners: List[Listener] = []
        self._revision = 0
        self._emitting = False

    @classmethod
    def from_tasks(
        cls,
        tasks: Iterable[Task],
        *,
        task_filter: Union[TaskFilter, str] = TaskFilter.ALL,
        clock: Optional[Clock] = None,
        next_id: Optional[int] = None,
    ) -> TaskStore:
        """
        Build a store from an existing newest-first task list.

        Text is trimmed. The id counter resumes at `next_id` when given, and
        never below the highest id seen plus one, so ids are not handed out
        again. The edit session always starts idle.

        Raises:
            TaskValidationError on blank text, ids below 1 or duplicate ids.
        """
        ordered = list(tasks)
        floor = max((t.id for t in ordered), default=0) + 1
        store = cls(
            clock,
            initial_filter=task_filter,
            start_id=max(floor, next_id or 1),
        )
        for task in reversed(ordered):
            if task.id < 1:
                raise TaskValidationError("task id must be positive", detail={"task_id": task.id})
            text = (task.text or "").strip()
            if not text:
                raise TaskValidationError("empty text", detail={"task_id": task.id})
            if task.id in store._items:
                raise TaskValidationError("duplicate task id", detail={"task_id": task.id})
            store._items[task.id] = task if text == task.text else replace(task, text=text)
        logger.info("TaskStore restored tasks=%s filter=%s", len(store._items), store._filter.value)
        return store

    def _now(self) -> datetime:
        return self._clock()

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def _require(self, task_id: int) -> Task:
        task = self._items.get(task_id)
        if task is None:
            raise self._rejected(TaskNotFoundError(task_id))
        return task

    def _require_session(self) -> Editing:
        if not isinstance(self._session, Editing):
            raise self._rejected(InvalidStateError("No task is being edited"))
        return self._session

    @staticmethod
    def _rejected(exc: TaskStoreError) -> TaskStoreError:
        logger.info("Command rejected: %s (%s)", exc.message, exc.code)
        return exc

    def _editing(self, task_id: int) -> bool:
        return isinstance(self._session, Editing) and self._session.task_id == task_id

    # ---- subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register `listener`, call it once with the current view, and return an
        unsubscribe callable. Listeners run after every state-changing command.
        """
        with self._lock:
            self._listeners.append(listener)
            listener(self.view())

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        # A listener may issue commands. Nested emits only bump the revision;
        # the outermost emit then restarts delivery with a fresh view so no
        # listener is left holding a stale one.
        self._revision += 1
        if self._emitting or not self._listeners:
            return
        self._emitting = True
        try:
            delivered = False
            while not delivered:
                revision = self._revision
                snapshot = self.view()
                delivered = True
                for listener in list(self._listeners):
                    listener(snapshot)
                    if self._revision != revision:
                        delivered = False
                        break
        finally:
            self._emitting = False

    # ---- commands ----

    def add(self, raw_text: str) -> Task:
        """Trim `raw_text` and prepend a new task; blank input is rejected."""
        text = (raw_text or "").strip()
        if not text:
            raise self._rejected(TaskValidationError("empty text"))
        with self._lock:
            task = Task(id=self._allocate_id(), text=text, completed=False, created_at=self._now())
            self._items[task.id] = task
            logger.debug("Task added id=%s", task.id)
            self._emit()
            return task

    def toggle(self, task_id: int) -> Task:
        """Flip completion. Completing the task under edit cancels that edit."""
        with self._lock:
            task = self._require(task_id)
            updated = replace(task, completed=not task.completed, updated_at=self._now())
            self._items[task_id] = updated
            if updated.completed and self._editing(task_id):
                self._session = IDLE
                logger.info("Edit of task %s cancelled: task was completed", task_id)
            logger.debug("Task toggled id=%s completed=%s", task_id, updated.completed)
            self._emit()
            return updated

    def delete(self, task_id: int) -> bool:
        """Remove a task. Returns False (and changes nothing) if it is absent."""
        with self._lock:
            if self._items.pop(task_id, None) is None:
                return False
            if self._editing(task_id):
                self._session = IDLE
            logger.debug("Task deleted id=%s", task_id)
            self._emit()
            return True

    def begin_edit(self, task_id: int) -> Editing:
        """Open an edit session seeded with the task's text, replacing any prior one."""
        with self._lock:
            task = self._require(task_id)
            if task.completed:
                raise self._rejected(
                    InvalidStateError("Completed tasks cannot be edited", detail={"task_id": task_id})
                )
            self._session = Editing(task_id=task_id, draft=task.text)
            logger.debug("Edit started id=%s", task_id)
            self._emit()
            return self._session

    def update_draft(self, text: str) -> Editing:
        """Replace the draft verbatim; trimming happens at commit."""
        with self._lock:
            session = self._require_session()
            self._session = Editing(task_id=session.task_id, draft=text)
            self._emit()
            return self._session

    def commit_edit(self) -> Task:
        """
        Apply the trimmed draft to its task and close the session.

        A blank draft is rejected and the session stays open for correction.
        """
        with self._lock:
            session = self._require_session()
            text = session.draft.strip()
            if not text:
                raise self._rejected(TaskValidationError("empty text", detail={"task_id": session.task_id}))
            task = self._require(session.task_id)
            updated = replace(task, text=text, updated_at=self._now())
            self._items[task.id] = updated
            self._session = IDLE
            logger.debug("Edit committed id=%s", task.id)
            self._emit()
            return updated

    def cancel_edit(self) -> None:
        """Discard the draft and close the session; no-op when idle."""
        with self._lock:
            if not isinstance(self._session, Editing):
                return
            logger.debug("Edit cancelled id=%s", self._session.task_id)
            self._session = IDLE
            self._emit()

    def clear_completed(self) -> int:
        """Remove all completed tasks, keeping the order of the rest. Returns the number removed."""
        with self._lock:
            doomed = [tid for tid, t in self._items.items() if t.completed]
            if not doomed:
                return 0
            for tid in doomed:
                del self._items[tid]
            if isinstance(self._session, Editing) and self._session.task_id not in self._items:
                self._session = IDLE
            logger.debug("Cleared completed tasks removed=%s", len(doomed))
            self._emit()
            return len(doomed)

    def set_filter(self, task_filter: Union[TaskFilter, str]) -> TaskFilter:
        with self._lock:
            parsed = TaskFilter.parse(task_filter)
            if parsed is not self._filter:
                self._filter = parsed
                self._emit()
            return parsed

    # ---- queries ----

    @property
    def filter(self) -> TaskFilter:
        return self._filter

    @property
    def edit_session(self) -> EditSession:
        return self._session

    def tasks(self) -> Tuple[Task, ...]:
        """All tasks, newest first."""
        with self._lock:
            return tuple(reversed(list(self._items.values())))

    def get(self, task_id: int) -> Optional[Task]:
        with self._lock:
            return self._items.get(task_id)

    @property
    def next_id(self) -> int:
        """The id the next added task will receive."""
        with self._lock:
            return self._next_id

    def filtered_view(self) -> Tuple[Task, ...]:
        with self._lock:
            return compute_filtered_view(self.tasks(), self._filter)

    def counts(self) -> Counts:
        return compute_counts(self.tasks())

    def empty_state_reason(self) -> Optional[EmptyStateReason]:
        with self._lock:
            return empty_state_reason(self.tasks(), self._filter)

    def view(self) -> TaskView:
        with self._lock:
            tasks = self.tasks()
            return TaskView(
                items=compute_filtered_view(tasks, self._filter),
                counts=compute_counts(tasks),
                filter=self._filter,
                edit_session=self._session,
                empty_state=empty_state_reason(tasks, self._filter),
            )
