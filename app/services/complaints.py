# File: app/services/complaints.py
"""
Complaint lifecycle engine.

Complaints are created by citizens against a category and inherit that
category's agency. Status moves through a small state machine:

    pending     -> in_progress | resolved | rejected
    in_progress -> resolved | rejected
    resolved, rejected: terminal

Who may read, update, comment on or delete a complaint is decided by
app.services.policy; listing applies the same scoping as a filter that query
parameters cannot widen.
"""
import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.errors import InvalidStateError, NotFoundError, ValidationError
from app.db.pagination import paginate
from app.models.category import Category
from app.models.complaint import Complaint, ComplaintStatus, Priority
from app.models.response import Response
from app.models.user import STAFF_ROLES, UserRole
from app.services.policy import Action, Actor, ensure_access

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ComplaintStatus, tuple[ComplaintStatus, ...]] = {
    ComplaintStatus.pending: (ComplaintStatus.in_progress, ComplaintStatus.resolved, ComplaintStatus.rejected),
    ComplaintStatus.in_progress: (ComplaintStatus.resolved, ComplaintStatus.rejected),
    ComplaintStatus.resolved: (),
    ComplaintStatus.rejected: (),
}

UPDATABLE_FIELDS = ("title", "description", "priority", "location", "contact_phone", "contact_email")


def can_transition(current: ComplaintStatus, target: ComplaintStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def _with_summaries(q):
    return q.options(
        joinedload(Complaint.category),
        joinedload(Complaint.agency),
        joinedload(Complaint.user),
    )


def _load(db: Session, complaint_id: int, with_thread: bool = False) -> Complaint:
    q = _with_summaries(db.query(Complaint))
    if with_thread:
        q = q.options(selectinload(Complaint.responses).joinedload(Response.user))
    complaint = q.filter(Complaint.id == complaint_id).first()
    if not complaint:
        raise NotFoundError("Complaint not found")
    return complaint


def _required_text(value: Optional[str], label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def create(db: Session, actor: Actor, title: str, description: str, category_id: int,
           priority: Priority, location: Optional[str] = None, contact_phone: Optional[str] = None,
           contact_email: Optional[str] = None) -> Complaint:
    ensure_access(actor, Action.complaint_create, message="Only citizens can file complaints")
    title = _required_text(title, "Title")
    description = _required_text(description, "Description")
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")

    complaint = Complaint(
        title=title,
        description=description,
        category_id=category.id,
        agency_id=category.agency_id,
        user_id=actor.id,
        status=ComplaintStatus.pending,
        priority=priority,
        location=location,
        contact_phone=contact_phone,
        contact_email=contact_email,
    )
    db.add(complaint)
    db.commit()
    logger.info(f"Complaint {complaint.id} filed by user {actor.id} for agency {complaint.agency_id}")
    return _load(db, complaint.id)


def _attach_latest_responses(db: Session, complaints: list[Complaint]) -> None:
    """Fetch only the newest response of each complaint on the page."""
    if not complaints:
        return
    ranked = (
        select(
            Response.id,
            func.row_number().over(
                partition_by=Response.complaint_id,
                order_by=[Response.created_at.desc(), Response.id.desc()],
            ).label("rn"),
        )
        .where(Response.complaint_id.in_([c.id for c in complaints]))
        .subquery()
    )
    latest = (
        db.query(Response)
        .options(joinedload(Response.user))
        .join(ranked, Response.id == ranked.c.id)
        .filter(ranked.c.rn == 1)
        .all()
    )
    by_complaint = {r.complaint_id: r for r in latest}
    for complaint in complaints:
        complaint.latest_response = by_complaint.get(complaint.id)


def list_complaints(db: Session, actor: Actor, page: int = 1, limit: int = 10,
                    search: Optional[str] = None, status: Optional[ComplaintStatus] = None,
                    priority: Optional[Priority] = None, category_id: Optional[int] = None,
                    agency_id: Optional[int] = None) -> dict:
    q = _with_summaries(db.query(Complaint))

    if search:
        term = f"%{search}%"
        q = q.filter(or_(Complaint.title.ilike(term), Complaint.description.ilike(term)))
    if status:
        q = q.filter(Complaint.status == status)
    if priority:
        q = q.filter(Complaint.priority == priority)
    if category_id is not None:
        q = q.filter(Complaint.category_id == category_id)
    if agency_id is not None:
        q = q.filter(Complaint.agency_id == agency_id)

    # role scoping is ANDed with the explicit filters above
    if actor.role == UserRole.citizen:
        q = q.filter(Complaint.user_id == actor.id)
    elif actor.role in STAFF_ROLES:
        if actor.agency_id is None:
            q = q.filter(Complaint.id.is_(None))
        else:
            q = q.filter(Complaint.agency_id == actor.agency_id)

    result = paginate(q.order_by(Complaint.created_at.desc(), Complaint.id.desc()), page, limit)
    _attach_latest_responses(db, result["data"])
    return result


def get(db: Session, actor: Actor, complaint_id: int) -> Complaint:
    complaint = _load(db, complaint_id, with_thread=True)
    ensure_access(actor, Action.complaint_read, owner_id=complaint.user_id, agency_id=complaint.agency_id,
                  message="Not authorized to access this complaint")
    return complaint


def update(db: Session, actor: Actor, complaint_id: int, patch: dict) -> Complaint:
    complaint = _load(db, complaint_id)
    ensure_access(actor, Action.complaint_update, owner_id=complaint.user_id, agency_id=complaint.agency_id,
                  message="Not authorized to update this complaint")
    patch = dict(patch)
    for field, label in (("title", "Title"), ("description", "Description")):
        if patch.get(field) is not None:
            patch[field] = _required_text(patch[field], label)

    if patch.get("category_id") is not None and patch["category_id"] != complaint.category_id:
        category = db.get(Category, patch["category_id"])
        if not category:
            raise NotFoundError("Category not found")
        if category.agency_id != complaint.agency_id:
            raise ValidationError("Category does not belong to the same agency")
        complaint.category_id = category.id

    new_status = patch.get("status")
    if new_status is not None and new_status != complaint.status:
        if not can_transition(complaint.status, new_status):
            raise InvalidStateError(
                f"Cannot change status from {complaint.status.value} to {new_status.value}"
            )
        logger.info(f"Complaint {complaint.id}: {complaint.status.value} -> {new_status.value} by user {actor.id}")
        complaint.status = new_status

    for field in UPDATABLE_FIELDS:
        if field in patch and patch[field] is not None:
            setattr(complaint, field, patch[field])

    db.commit()
    db.expire_all()
    return _load(db, complaint_id)


def add_comment(db: Session, actor: Actor, complaint_id: int, content: str) -> Response:
    complaint = _load(db, complaint_id)
    ensure_access(actor, Action.complaint_comment, owner_id=complaint.user_id, agency_id=complaint.agency_id,
                  message="Not authorized to comment on this complaint")
    content = (content or "").strip()
    if not content:
        raise ValidationError("Empty comment")

    response = Response(complaint_id=complaint.id, user_id=actor.id, content=content)
    db.add(response)
    db.commit()
    db.refresh(response)
    return response


def remove(db: Session, actor: Actor, complaint_id: int) -> dict:
    complaint = _load(db, complaint_id)
    ensure_access(actor, Action.complaint_delete, owner_id=complaint.user_id, agency_id=complaint.agency_id,
                  message="Not authorized to delete this complaint")
    if complaint.status != ComplaintStatus.pending:
        raise InvalidStateError("Only pending complaints can be deleted")
    db.delete(complaint)
    db.commit()
    logger.info(f"Complaint {complaint_id} deleted by user {actor.id}")
    return {"message": "Complaint deleted successfully"}
