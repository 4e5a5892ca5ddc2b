# File: app/routers/citizens.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.security import get_current_user, require_role
from app.db.pagination import DEFAULT_LIMIT, MAX_LIMIT
from app.db.session import get_db
from app.models.user import User, UserRole
from app.schemas.auth import MessageOut
from app.schemas.common import Page
from app.schemas.user import CitizenAdminUpdate, CitizenCreate, ProfileOut, ProfileUpdate, UserOut
from app.services import accounts

router = APIRouter(prefix="/api/citizens", tags=["citizens"])

admin_only = require_role(UserRole.admin)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_citizen(body: CitizenCreate, db: Session = Depends(get_db)):
    return accounts.register(db, body.email, body.password, body.name, role=UserRole.citizen)


@router.get("/profile", response_model=ProfileOut)
def get_profile(user: User = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=ProfileOut)
def update_profile(body: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return accounts.update_profile(db, user, name=body.name, email=body.email, password=body.password)


@router.get("", response_model=Page[UserOut])
def list_citizens(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: str | None = None,
    db: Session = Depends(get_db),
    _=Depends(admin_only),
):
    return accounts.list_citizens(db, page, limit, search)


@router.get("/{user_id}", response_model=ProfileOut)
def get_citizen(user_id: int, db: Session = Depends(get_db), _=Depends(admin_only)):
    return accounts.get_citizen(db, user_id)


@router.put("/{user_id}", response_model=ProfileOut)
def update_citizen(user_id: int, body: CitizenAdminUpdate, db: Session = Depends(get_db), _=Depends(admin_only)):
    return accounts.admin_update_citizen(db, user_id, body.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=MessageOut)
def deactivate_citizen(user_id: int, db: Session = Depends(get_db), _=Depends(admin_only)):
    return accounts.deactivate_citizen(db, user_id)
