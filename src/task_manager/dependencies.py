from __future__ import annotations

from fastapi import Request

from .store import TaskStore


# PUBLIC_INTERFACE
def get_store(request: Request) -> TaskStore:
    """
    FastAPI dependency returning the process-wide TaskStore attached to the app
    by create_app().
    """
    return request.app.state.store
