# File: app/schemas/directory.py
from datetime import datetime
from pydantic import BaseModel, Field
from app.models.user import UserRole


class AgencyCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    description: str | None = Field(default=None, max_length=500)


class AgencyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=120)
    description: str | None = Field(default=None, max_length=500)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    agency_id: int


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    agency_id: int | None = None


class StaffLite(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class AgencyRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    agency_id: int
    agency: AgencyRef
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CategoryLite(BaseModel):
    id: int
    name: str
    description: str | None = None

    class Config:
        from_attributes = True


class AgencyOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    created_at: datetime | None = None
    staff: list[StaffLite] = []
    categories: list[CategoryLite] = []

    class Config:
        from_attributes = True
