# File: app/routers/complaints.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.security import get_current_user
from app.db.pagination import DEFAULT_LIMIT, MAX_LIMIT
from app.db.session import get_db
from app.models.complaint import ComplaintStatus, Priority
from app.models.user import User
from app.schemas.auth import MessageOut
from app.schemas.common import Page
from app.schemas.complaint import (
    CommentIn,
    ComplaintCreate,
    ComplaintDetailOut,
    ComplaintListItem,
    ComplaintOut,
    ComplaintUpdate,
    ResponseOut,
)
from app.services import complaints
from app.services.policy import Actor

router = APIRouter(prefix="/api/complaints", tags=["complaints"])


def current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


@router.post("", response_model=ComplaintOut, status_code=status.HTTP_201_CREATED)
def create_complaint(body: ComplaintCreate, db: Session = Depends(get_db), actor: Actor = Depends(current_actor)):
    return complaints.create(db, actor, **body.model_dump())


@router.get("", response_model=Page[ComplaintListItem])
def list_complaints(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = None,
    status: Optional[ComplaintStatus] = None,
    priority: Optional[Priority] = None,
    category_id: Optional[int] = None,
    agency_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(current_actor),
):
    return complaints.list_complaints(
        db, actor, page, limit,
        search=search, status=status, priority=priority,
        category_id=category_id, agency_id=agency_id,
    )


@router.get("/{complaint_id}", response_model=ComplaintDetailOut)
def get_complaint(complaint_id: int, db: Session = Depends(get_db), actor: Actor = Depends(current_actor)):
    return complaints.get(db, actor, complaint_id)


@router.put("/{complaint_id}", response_model=ComplaintOut)
def update_complaint(complaint_id: int, body: ComplaintUpdate, db: Session = Depends(get_db),
                     actor: Actor = Depends(current_actor)):
    return complaints.update(db, actor, complaint_id, body.model_dump(exclude_unset=True))


@router.delete("/{complaint_id}", response_model=MessageOut)
def delete_complaint(complaint_id: int, db: Session = Depends(get_db), actor: Actor = Depends(current_actor)):
    return complaints.remove(db, actor, complaint_id)


@router.post("/{complaint_id}/comments", response_model=ResponseOut, status_code=status.HTTP_201_CREATED)
def add_comment(complaint_id: int, body: CommentIn, db: Session = Depends(get_db),
                actor: Actor = Depends(current_actor)):
    return complaints.add_comment(db, actor, complaint_id, body.content)
