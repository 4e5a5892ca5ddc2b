# File: app/routers/auth.py

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.audit import request_context
from app.core.config import settings
from app.core.errors import ForbiddenError
from app.core.ratelimit import PASSWORD_RESET_LIMIT_MESSAGE, limiter
from app.core.security import get_current_user
from app.db.session import get_db
from app.models.user import User, UserRole
from app.schemas.auth import EmailOnly, LoginIn, MessageOut, RegisterIn, ResetIn, TokenOut
from app.schemas.user import ProfileOut
from app.services import accounts, password_reset
from app.services.notify_email import Mailer, get_mailer

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    # staff and admins are provisioned by an admin, never self-registered
    if body.role is not None and body.role != UserRole.citizen:
        raise ForbiddenError("Only citizen accounts can be self-registered")
    user = accounts.register(db, body.email, body.password, body.name)
    return {"token": accounts.issue_token(user), "user": user}


@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, db: Session = Depends(get_db)):
    user, token = accounts.login(db, body.email, body.password)
    return {"token": token, "user": user}


@router.get("/profile", response_model=ProfileOut)
def profile(user: User = Depends(get_current_user)):
    return user


@router.post("/forgot-password", response_model=MessageOut)
@limiter.limit(settings.ratelimit_password_reset, error_message=PASSWORD_RESET_LIMIT_MESSAGE)
def forgot_password(request: Request, body: EmailOnly, db: Session = Depends(get_db),
                    mailer: Mailer = Depends(get_mailer)):
    return password_reset.request_reset(db, mailer, body.email, request_context(request))


@router.post("/reset-password", response_model=MessageOut)
@limiter.limit(settings.ratelimit_password_reset, error_message=PASSWORD_RESET_LIMIT_MESSAGE)
def reset_password(request: Request, body: ResetIn, db: Session = Depends(get_db)):
    return password_reset.redeem(db, body.token, body.password, request_context(request))
