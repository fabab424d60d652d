from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..dependencies import get_store
from ..schemas import CountsOut, ErrorOut, FilterOut, FilterUpdate, TaskViewOut
from ..snapshot import dump_snapshot
from ..store import TaskStore

router = APIRouter(
    prefix="/api/v1",
    tags=["view"],
)


# PUBLIC_INTERFACE
@router.get(
    "/view",
    response_model=TaskViewOut,
    summary="Get View",
    description=(
        "Everything the presentation layer renders: visible items, counts, filter, "
        "edit session and, when nothing is visible, the empty-state message."
    ),
)
def get_view(store: TaskStore = Depends(get_store)) -> TaskViewOut:
    return TaskViewOut.from_view(store.view())


# PUBLIC_INTERFACE
@router.get("/counts", response_model=CountsOut, summary="Get Counts")
def get_counts(store: TaskStore = Depends(get_store)) -> CountsOut:
    return CountsOut.from_counts(store.counts())


# PUBLIC_INTERFACE
@router.get("/filter", response_model=FilterOut, summary="Get Filter")
def get_filter(store: TaskStore = Depends(get_store)) -> FilterOut:
    return FilterOut(filter=store.filter.value)


# PUBLIC_INTERFACE
@router.put(
    "/filter",
    response_model=FilterOut,
    summary="Set Filter",
    responses={422: {"model": ErrorOut, "description": "Unknown filter"}},
)
def set_filter(payload: FilterUpdate, store: TaskStore = Depends(get_store)) -> FilterOut:
    return FilterOut(filter=store.set_filter(payload.filter).value)


# PUBLIC_INTERFACE
@router.get(
    "/snapshot",
    summary="Export Snapshot",
    description="Serialized task list and filter. The edit session is not included.",
)
def get_snapshot(store: TaskStore = Depends(get_store)) -> Dict[str, Any]:
    return dump_snapshot(store)
