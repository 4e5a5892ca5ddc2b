#app\schemas\user.py
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.models.user import UserRole

class AgencyLite(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class UserOut(BaseModel):
    id: int
    email: str
    name: str
    role: UserRole
    agency_id: int | None = None
    is_active: bool = True

    class Config:
        from_attributes = True

class ProfileOut(UserOut):
    agency: AgencyLite | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None

class CitizenCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8, max_length=512)

class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=120)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=512)

class CitizenAdminUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=120)
    email: EmailStr | None = None
    is_active: bool | None = None

class StaffCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8, max_length=512)
    role: UserRole = UserRole.agency_staff
