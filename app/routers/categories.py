# File: app/routers/categories.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.security import require_action
from app.db.pagination import DEFAULT_LIMIT, MAX_LIMIT
from app.db.session import get_db
from app.schemas.auth import MessageOut
from app.schemas.common import Page
from app.schemas.directory import CategoryCreate, CategoryOut, CategoryUpdate
from app.services import categories
from app.services.policy import Action

router = APIRouter(prefix="/api/categories", tags=["categories"])

can_read = require_action(Action.directory_read)
can_write = require_action(Action.directory_write)


@router.get("", response_model=Page[CategoryOut])
def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: str | None = None,
    agency_id: int | None = None,
    db: Session = Depends(get_db),
    _=Depends(can_read),
):
    return categories.list_categories(db, page, limit, search=search, agency_id=agency_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryCreate, db: Session = Depends(get_db), _=Depends(can_write)):
    return categories.create_category(db, body.name, body.agency_id, body.description)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db), _=Depends(can_read)):
    return categories.get_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, body: CategoryUpdate, db: Session = Depends(get_db), _=Depends(can_write)):
    return categories.update_category(db, category_id, body.model_dump(exclude_unset=True))


@router.delete("/{category_id}", response_model=MessageOut)
def delete_category(category_id: int, db: Session = Depends(get_db), _=Depends(can_write)):
    return categories.delete_category(db, category_id)
