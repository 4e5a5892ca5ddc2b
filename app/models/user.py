# File: app\models\user.py
# Project: citizen-complaints-backend
# Auto-added for reference

from __future__ import annotations
from enum import Enum as PyEnum
from sqlalchemy import String, Boolean, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base
from datetime import datetime

class UserRole(PyEnum):
    admin = "admin"
    agency_admin = "agency_admin"
    agency_staff = "agency_staff"
    citizen = "citizen"

# roles that belong to an agency; agency_id is set for these and only these
STAFF_ROLES = (UserRole.agency_staff, UserRole.agency_admin)

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    name : Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, default=UserRole.citizen)
    agency_id: Mapped[int | None] = mapped_column(ForeignKey("agencies.id", ondelete="RESTRICT"), index=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=func.now())
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    agency = relationship("Agency", back_populates="staff")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
