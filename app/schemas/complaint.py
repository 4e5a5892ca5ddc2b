from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.complaint import ComplaintStatus, Priority
from app.models.user import UserRole


class ComplaintCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=4000)
    category_id: int
    priority: Priority
    location: Optional[str] = Field(default=None, max_length=300)
    contact_phone: Optional[str] = Field(default=None, max_length=30)
    contact_email: Optional[str] = Field(default=None, max_length=255)


class ComplaintUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=4000)
    category_id: Optional[int] = None
    priority: Optional[Priority] = None
    status: Optional[ComplaintStatus] = None
    location: Optional[str] = Field(default=None, max_length=300)
    contact_phone: Optional[str] = Field(default=None, max_length=30)
    contact_email: Optional[str] = Field(default=None, max_length=255)


class CommentIn(BaseModel):
    content: str = Field(min_length=1, max_length=4000)


class Lite(BaseModel):
    """Lightweight id/name summary for category and agency on complaints."""
    id: int
    name: str

    class Config:
        from_attributes = True


class CreatorLite(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class AuthorLite(BaseModel):
    id: int
    name: str
    role: UserRole

    class Config:
        from_attributes = True


class ResponseOut(BaseModel):
    id: int
    content: str
    created_at: datetime
    user: AuthorLite

    class Config:
        from_attributes = True


class ComplaintOut(BaseModel):
    id: int
    title: str
    description: str
    status: ComplaintStatus
    priority: Priority

    location: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    category_id: int
    agency_id: int
    user_id: int

    created_at: datetime
    updated_at: Optional[datetime] = None

    # Embedded objects for UI
    category: Lite
    agency: Lite
    user: CreatorLite

    class Config:
        from_attributes = True


class ComplaintListItem(ComplaintOut):
    latest_response: Optional[ResponseOut] = None


class ComplaintDetailOut(ComplaintOut):
    # full thread, newest first
    responses: List[ResponseOut] = []
