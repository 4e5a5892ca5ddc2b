# File: app/services/policy.py
"""
Role and ownership based access decisions.

can_access() is the single place that decides whether an actor may perform an
action on a resource. Complaint rules compare a staff member's own agency_id
with the complaint's agency_id, so every member of an agency sees the same
complaints.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.errors import ForbiddenError
from app.models.user import STAFF_ROLES, UserRole


class Action(str, Enum):
    directory_read = "directory_read"
    directory_write = "directory_write"
    complaint_create = "complaint_create"
    complaint_read = "complaint_read"
    complaint_update = "complaint_update"
    complaint_comment = "complaint_comment"
    complaint_delete = "complaint_delete"


@dataclass(frozen=True)
class Actor:
    id: int
    role: UserRole
    agency_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, role=user.role, agency_id=user.agency_id)


DIRECTORY_READERS = (UserRole.admin, UserRole.agency_admin, UserRole.agency_staff)

# read/update/comment on a complaint share the same ownership rule
_THREAD_ACTIONS = (Action.complaint_read, Action.complaint_update, Action.complaint_comment)


def can_access(actor: Actor, action: Action, owner_id: Optional[int] = None,
               agency_id: Optional[int] = None) -> bool:
    if action == Action.directory_write:
        return actor.role == UserRole.admin
    if action == Action.directory_read:
        return actor.role in DIRECTORY_READERS
    if action == Action.complaint_create:
        return actor.role == UserRole.citizen
    if action == Action.complaint_delete:
        return actor.role == UserRole.citizen and owner_id is not None and actor.id == owner_id
    if action in _THREAD_ACTIONS:
        if actor.role == UserRole.citizen:
            return owner_id is not None and actor.id == owner_id
        if actor.role in STAFF_ROLES:
            return actor.agency_id is not None and actor.agency_id == agency_id
        return actor.role == UserRole.admin
    return False


def ensure_access(actor: Actor, action: Action, owner_id: Optional[int] = None,
                  agency_id: Optional[int] = None, message: Optional[str] = None):
    if not can_access(actor, action, owner_id=owner_id, agency_id=agency_id):
        raise ForbiddenError(message)
