# File: app/routers/agencies.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.security import require_action
from app.db.pagination import DEFAULT_LIMIT, MAX_LIMIT
from app.db.session import get_db
from app.schemas.auth import MessageOut
from app.schemas.common import Page
from app.schemas.directory import AgencyCreate, AgencyOut, AgencyUpdate, StaffLite
from app.schemas.user import StaffCreate
from app.services import agencies
from app.services.policy import Action

router = APIRouter(prefix="/api/agencies", tags=["agencies"])

can_read = require_action(Action.directory_read)
can_write = require_action(Action.directory_write)


@router.get("", response_model=Page[AgencyOut])
def list_agencies(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: str | None = None,
    db: Session = Depends(get_db),
    _=Depends(can_read),
):
    return agencies.list_agencies(db, page, limit, search)


@router.post("", response_model=AgencyOut, status_code=status.HTTP_201_CREATED)
def create_agency(body: AgencyCreate, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.create_agency(db, body.name, body.description)


@router.get("/{agency_id}", response_model=AgencyOut)
def get_agency(agency_id: int, db: Session = Depends(get_db), _=Depends(can_read)):
    return agencies.get_agency(db, agency_id)


@router.put("/{agency_id}", response_model=AgencyOut)
def update_agency(agency_id: int, body: AgencyUpdate, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.update_agency(db, agency_id, body.model_dump(exclude_unset=True))


@router.delete("/{agency_id}", response_model=MessageOut)
def delete_agency(agency_id: int, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.delete_agency(db, agency_id)


@router.post("/{agency_id}/staff", response_model=StaffLite, status_code=status.HTTP_201_CREATED)
def create_staff(agency_id: int, body: StaffCreate, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.create_staff(db, agency_id, body.email, body.password, body.name, role=body.role)


@router.post("/{agency_id}/staff/{user_id}", response_model=StaffLite)
def assign_staff(agency_id: int, user_id: int, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.assign_staff(db, agency_id, user_id)


@router.delete("/{agency_id}/staff/{user_id}", response_model=StaffLite)
def remove_staff(agency_id: int, user_id: int, db: Session = Depends(get_db), _=Depends(can_write)):
    return agencies.remove_staff(db, agency_id, user_id)
