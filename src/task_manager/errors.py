from __future__ import annotations

from typing import Any, Optional


# PUBLIC_INTERFACE
class TaskStoreError(Exception):
    """
    Base class for rejected store commands.

    Every subclass is non-fatal: the store leaves its state as it was before the
    command and the caller surfaces the message as feedback.

    Attributes:
        code: Stable error name used in API error envelopes.
        status_code: HTTP status the API layer maps this error to.
        detail: Optional extra context (e.g. the offending task id).
    """

    code = "TaskStoreError"
    status_code = 400

    def __init__(self, message: str, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# PUBLIC_INTERFACE
class TaskValidationError(TaskStoreError):
    """Empty or whitespace-only text on add/commit, or an unknown filter value."""

    code = "ValidationError"
    status_code = 422


# PUBLIC_INTERFACE
class TaskNotFoundError(TaskStoreError):
    """A command referenced a task id that does not exist."""

    code = "NotFound"
    status_code = 404

    def __init__(self, task_id: int) -> None:
        super().__init__("Task not found", detail={"task_id": task_id})
        self.task_id = task_id


# PUBLIC_INTERFACE
class InvalidStateError(TaskStoreError):
    """The command is not allowed in the current edit-session state."""

    code = "InvalidState"
    status_code = 409
