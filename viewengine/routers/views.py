# File: /viewengine/routers/views.py | Version: 1.0 | Title: Saved Views API (CRUD, clone, reorder, count, apply)
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from viewengine.crud import saved_view as crud
from viewengine.db.session import get_db
from viewengine.schemas.query import ApplyViewOut
from viewengine.schemas.view import (
    CloneRequest,
    ReorderRequest,
    SavedViewCreate,
    SavedViewOut,
    SavedViewUpdate,
)
from viewengine.security import get_current_user_id

router = APIRouter(prefix="/views", tags=["Views"])


# ----------------------------
# Collection
# ----------------------------
@router.get("", response_model=List[SavedViewOut], summary="List my views plus views shared with me")
def list_views(
    entity_type: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.list_views(db, user_id, entity_type)


@router.post("", response_model=SavedViewOut, summary="Create a saved view (save as)")
def create_view(
    data: SavedViewCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.create_view(db, user_id, data)


@router.post("/reorder", response_model=List[SavedViewOut], summary="Reorder my view tabs (all or nothing)")
def reorder_views(
    data: ReorderRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.reorder_views(db, user_id, data.entity_type, data.ordered_ids)


# ----------------------------
# Single view
# ----------------------------
@router.get("/{view_id}", response_model=SavedViewOut, summary="Get a view I own or that is shared")
def get_view(
    view_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.get_visible_view(db, user_id, view_id)


@router.patch("/{view_id}", response_model=SavedViewOut, summary="Update a saved view (owner-only)")
def update_view(
    view_id: str,
    data: SavedViewUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.update_view(db, user_id, view_id, data)


@router.delete("/{view_id}", summary="Delete a saved view (owner-only, keeps a fallback)")
def delete_view(
    view_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    crud.delete_view(db, user_id, view_id)
    return {"detail": "View deleted"}


@router.post("/{view_id}/clone", response_model=SavedViewOut, summary="Copy any visible view into a private one")
def clone_view(
    view_id: str,
    data: Optional[CloneRequest] = Body(default=None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.clone_view(db, user_id, view_id, data.name if data else None)


@router.post("/{view_id}/count", response_model=SavedViewOut, summary="Recount records matching the view")
def refresh_count(
    view_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.refresh_record_count(db, user_id, view_id)


@router.post("/{view_id}/apply", response_model=ApplyViewOut, summary="Compile a view into a query request")
def apply_view(
    view_id: str,
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return crud.apply_view(db, user_id, view_id, page=page, page_size=page_size)
