# File: app/services/agencies.py
import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from app.db.pagination import paginate
from app.models.agency import Agency
from app.models.category import Category
from app.models.user import STAFF_ROLES, User, UserRole
from app.services import accounts

logger = logging.getLogger(__name__)


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Agency.id).filter(func.lower(Agency.name) == name.lower())
    if exclude_id is not None:
        q = q.filter(Agency.id != exclude_id)
    return q.first() is not None


def get_agency(db: Session, agency_id: int) -> Agency:
    agency = db.get(Agency, agency_id)
    if not agency:
        raise NotFoundError("Agency not found")
    return agency


def create_agency(db: Session, name: str, description: Optional[str] = None) -> Agency:
    name = name.strip()
    if _name_taken(db, name):
        raise ConflictError("Agency name already exists")
    agency = Agency(name=name, description=(description or "").strip() or None)
    db.add(agency)
    db.commit()
    db.refresh(agency)
    return agency


def list_agencies(db: Session, page: int, limit: int, search: Optional[str] = None) -> dict:
    q = db.query(Agency).options(selectinload(Agency.staff), selectinload(Agency.categories))
    if search:
        term = f"%{search}%"
        q = q.filter(or_(Agency.name.ilike(term), Agency.description.ilike(term)))
    return paginate(q.order_by(Agency.name.asc()), page, limit)


def update_agency(db: Session, agency_id: int, patch: dict) -> Agency:
    agency = get_agency(db, agency_id)
    if patch.get("name") is not None:
        name = patch["name"].strip()
        if name != agency.name and _name_taken(db, name, exclude_id=agency_id):
            raise ConflictError("Agency name already in use")
        agency.name = name
    if "description" in patch:
        agency.description = (patch["description"] or "").strip() or None
    db.commit()
    db.refresh(agency)
    return agency


def delete_agency(db: Session, agency_id: int) -> dict:
    agency = get_agency(db, agency_id)
    staff_count = db.query(User).filter(User.agency_id == agency_id).count()
    if staff_count > 0:
        raise InvalidStateError("Cannot delete agency with assigned staff")
    category_count = db.query(Category).filter(Category.agency_id == agency_id).count()
    if category_count > 0:
        raise InvalidStateError("Cannot delete agency with assigned categories")
    db.delete(agency)
    db.commit()
    return {"message": "Agency deleted successfully"}


def create_staff(db: Session, agency_id: int, email: str, password: str, name: str,
                 role: UserRole = UserRole.agency_staff) -> User:
    if role not in STAFF_ROLES:
        raise ValidationError("Role must be agency_staff or agency_admin")
    get_agency(db, agency_id)
    return accounts.register(db, email, password, name, role=role, agency_id=agency_id)


def assign_staff(db: Session, agency_id: int, user_id: int) -> User:
    get_agency(db, agency_id)
    staff = db.get(User, user_id)
    if not staff:
        raise NotFoundError("Staff member not found")
    if staff.role not in STAFF_ROLES:
        raise ValidationError("User must be an agency staff member")
    staff.agency_id = agency_id
    db.commit()
    db.refresh(staff)
    logger.info(f"Assigned staff {user_id} to agency {agency_id}")
    return staff


def remove_staff(db: Session, agency_id: int, user_id: int) -> User:
    staff = db.get(User, user_id)
    if not staff:
        raise NotFoundError("Staff member not found")
    if staff.agency_id != agency_id:
        raise ValidationError("Staff member is not assigned to this agency")
    # a staff role without an agency is not allowed
    staff.agency_id = None
    staff.role = UserRole.citizen
    db.commit()
    db.refresh(staff)
    logger.info(f"Removed staff {user_id} from agency {agency_id}")
    return staff
