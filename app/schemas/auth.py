# File: app/schemas/auth.py

from pydantic import BaseModel, EmailStr, Field
from app.models.user import UserRole
from app.schemas.user import UserOut

class RegisterIn(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8, max_length=512)
    role: UserRole | None = None

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=512)

class TokenOut(BaseModel):
    token: str
    user: UserOut

class EmailOnly(BaseModel):
    email: EmailStr

class ResetIn(BaseModel):
    token: str = Field(min_length=1)
    # length is checked by the reset workflow so the error carries its hint
    password: str = Field(max_length=512)

class MessageOut(BaseModel):
    message: str
    hint: str | None = None
