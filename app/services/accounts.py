# File: app/services/accounts.py
"""
User accounts: registration, login and citizen profile management.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ForbiddenError, InvalidCredentials, NotFoundError, ValidationError
from app.core.security import hash_password, make_token, verify_password
from app.db.pagination import paginate
from app.models.agency import Agency
from app.models.user import STAFF_ROLES, User, UserRole

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(User.id).filter(func.lower(User.email) == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


def register(db: Session, email: str, password: str, name: str,
             role: UserRole = UserRole.citizen, agency_id: Optional[int] = None) -> User:
    email = normalize_email(email)
    if _email_taken(db, email):
        raise ConflictError("User already exists")

    if role in STAFF_ROLES:
        if agency_id is None:
            raise ValidationError("Agency staff must belong to an agency")
        if not db.get(Agency, agency_id):
            raise NotFoundError("Agency not found")
    elif agency_id is not None:
        raise ValidationError("Only agency staff can belong to an agency")

    user = User(
        email=email,
        name=name.strip(),
        hashed_password=hash_password(password),
        role=role,
        agency_id=agency_id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} with role {role.value}")
    return user


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    user = db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()
    # same error for unknown email and wrong password
    if not user or not user.hashed_password or not verify_password(password, user.hashed_password):
        raise InvalidCredentials()
    if not user.is_active:
        raise ForbiddenError("Your account has been deactivated. Please contact support.")
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user, issue_token(user)


def issue_token(user: User) -> str:
    return make_token(user.id, user.role.value)


def update_profile(db: Session, user: User, name: Optional[str] = None,
                   email: Optional[str] = None, password: Optional[str] = None) -> User:
    if email is not None:
        email = normalize_email(email)
        if email != user.email and _email_taken(db, email, exclude_id=user.id):
            raise ConflictError("Email already in use")
        user.email = email
    if name is not None:
        user.name = name.strip()
    if password:
        user.hashed_password = hash_password(password)
    db.commit()
    db.refresh(user)
    return user


def list_citizens(db: Session, page: int, limit: int, search: Optional[str] = None) -> dict:
    q = db.query(User).filter(User.role == UserRole.citizen)
    if search:
        term = f"%{search}%"
        q = q.filter(or_(User.name.ilike(term), User.email.ilike(term)))
    return paginate(q.order_by(User.id.desc()), page, limit)


def get_citizen(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user or user.role != UserRole.citizen:
        raise NotFoundError("Citizen not found")
    return user


def admin_update_citizen(db: Session, user_id: int, patch: dict) -> User:
    user = get_citizen(db, user_id)
    if "is_active" in patch and patch["is_active"] is not None:
        user.is_active = bool(patch["is_active"])
    return update_profile(db, user, name=patch.get("name"), email=patch.get("email"))


def deactivate_citizen(db: Session, user_id: int) -> dict:
    user = get_citizen(db, user_id)
    # complaints keep pointing at the account, so it is deactivated rather than deleted
    user.is_active = False
    db.commit()
    logger.info(f"Deactivated citizen {user_id}")
    return {"message": "Citizen account deactivated successfully"}
