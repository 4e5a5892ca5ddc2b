# File: app/models/complaint.py
from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import String, Enum, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base
from app.models.response import Response

class ComplaintStatus(PyEnum):
    pending = "pending"
    in_progress = "in_progress"
    resolved = "resolved"
    rejected = "rejected"

class Priority(PyEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"

def _utcnow():
    return datetime.now(timezone.utc)

class Complaint(Base):
    __tablename__ = "complaints"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str] = mapped_column(String(4000))
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), index=True)
    agency_id: Mapped[int] = mapped_column(ForeignKey("agencies.id", ondelete="RESTRICT"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), index=True)
    status: Mapped[ComplaintStatus] = mapped_column(Enum(ComplaintStatus), default=ComplaintStatus.pending, index=True)
    priority: Mapped[Priority] = mapped_column(Enum(Priority), default=Priority.medium, index=True)

    location: Mapped[str | None] = mapped_column(String(300), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # set in python so ordering is stable within the same second on sqlite
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    category = relationship("Category")
    agency = relationship("Agency")
    user = relationship("User")
    responses = relationship(
        "Response",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by=[Response.created_at.desc(), Response.id.desc()],
    )

    @property
    def latest_response(self):
        # listings attach the newest response directly instead of loading the thread
        if "_latest_response" in vars(self):
            return self._latest_response
        return self.responses[0] if self.responses else None

    @latest_response.setter
    def latest_response(self, response):
        self._latest_response = response
