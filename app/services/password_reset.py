# File: app/services/password_reset.py
"""
Single-use, time-boxed password reset tokens.

request_reset() stores a random token and mails a link to it. redeem() marks
the token used with a conditional UPDATE and rewrites the password in the same
transaction, so two concurrent redemptions of one token cannot both succeed.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.audit import RequestContext, log_password_reset_attempt, log_suspicious_activity
from app.core.config import settings
from app.core.errors import AppError, InvalidOrExpiredToken, ServerError, ValidationError
from app.core.security import hash_password
from app.models.password_reset import PasswordReset
from app.models.user import User
from app.services.notify_email import Mailer

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

REQUEST_MESSAGE = "If your email is registered, you will receive a password reset link"
REQUEST_HINT = (
    "Please check your email for the reset link. "
    "If you don't receive it within a few minutes, check your spam folder."
)
RETRY_HINT = "Please try again later or contact support if the problem persists."
TOKEN_HINT = "The reset link may have expired or already been used. Please request a new password reset link."
WEAK_HINT = (
    "Password must be at least 8 characters long and include a mix of letters, "
    "numbers, and special characters."
)


def new_token() -> str:
    return secrets.token_hex(32)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def request_reset(db: Session, mailer: Mailer, email: str, ctx: RequestContext) -> dict:
    try:
        user = db.query(User).filter(func.lower(User.email) == (email or "").strip().lower()).first()
        if not user:
            log_password_reset_attempt(ctx, False, "Password reset requested for non-existent email")
            return {"message": REQUEST_MESSAGE, "hint": REQUEST_HINT}

        token = new_token()
        db.add(PasswordReset(
            user_id=user.id,
            token=token,
            expires_at=_now() + timedelta(minutes=settings.password_reset_ttl_minutes),
            used=False,
        ))
        db.commit()

        if not mailer.send_reset_password(user.email, token):
            log_password_reset_attempt(ctx, False, "Failed to send reset email", user.id)
            raise ServerError("Unable to send password reset email", hint=RETRY_HINT)

        log_password_reset_attempt(ctx, True, "Password reset email sent successfully", user.id)
        return {"message": REQUEST_MESSAGE, "hint": REQUEST_HINT}
    except AppError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Forgot password error: {e}", exc_info=True)
        log_suspicious_activity(ctx, "Forgot password error", {"error": str(e)})
        raise ServerError("An unexpected error occurred", hint=RETRY_HINT)


def redeem(db: Session, token: str, password: str, ctx: RequestContext) -> dict:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password is too weak", hint=WEAK_HINT)

    try:
        now = _now()
        reset = (
            db.query(PasswordReset)
            .filter(
                PasswordReset.token == token,
                PasswordReset.used.is_(False),
                PasswordReset.expires_at > now,
            )
            .first()
        )
        if not reset:
            log_password_reset_attempt(ctx, False, "Invalid or expired reset token")
            raise InvalidOrExpiredToken(hint=TOKEN_HINT)

        claimed = db.execute(
            update(PasswordReset)
            .where(
                PasswordReset.id == reset.id,
                PasswordReset.used.is_(False),
                PasswordReset.expires_at > now,
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            # another request redeemed it first
            db.rollback()
            log_password_reset_attempt(ctx, False, "Reset token already redeemed", reset.user_id)
            raise InvalidOrExpiredToken(hint=TOKEN_HINT)

        user = db.get(User, reset.user_id)
        user.hashed_password = hash_password(password)
        db.commit()

        log_password_reset_attempt(ctx, True, "Password reset successful", user.id)
        return {"message": "Password has been reset successfully", "hint": "You can now log in with your new password."}
    except AppError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Reset password error: {e}", exc_info=True)
        log_suspicious_activity(ctx, "Reset password error", {"error": str(e)})
        raise ServerError("An unexpected error occurred", hint=RETRY_HINT)
