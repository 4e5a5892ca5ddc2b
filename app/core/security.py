# app/core/security.py
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import ForbiddenError, InvalidToken, UnauthenticatedError
from passlib.hash import bcrypt_sha256
from app.db.session import get_db
from app.models.user import User, UserRole

ALGO = "HS256"
ACCESS_TTL = settings.jwt_expires_hours * 3600
bearer = HTTPBearer(auto_error=False)
_hasher = bcrypt_sha256.using(rounds=settings.bcrypt_rounds)

def hash_password(raw: str) -> str:
    return _hasher.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt_sha256.verify(raw, hashed)
    except ValueError:
        # malformed stored hash
        return False

def make_token(user_id: int, role: str, ttl: int = ACCESS_TTL) -> str:
    now = int(time.time())
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def verify_token(token: Optional[str]) -> tuple[int, str]:
    """Resolve a bearer claim to (user_id, role) or raise InvalidToken."""
    if not token:
        raise InvalidToken("No token, authorization denied")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO], options={"require": ["sub", "exp"]})
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.InvalidTokenError:
        raise InvalidToken("Token is not valid")
    try:
        return int(payload["sub"]), payload.get("role")
    except (TypeError, ValueError):
        raise InvalidToken("Invalid token payload")

def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                     db: Session = Depends(get_db)) -> User:
    user_id, _ = verify_token(creds.credentials if creds else None)
    user = db.get(User, user_id)
    if not user:
        raise UnauthenticatedError("User not found")
    if not user.is_active:
        raise ForbiddenError("Your account has been deactivated. Please contact support.")
    return user

def require_role(*roles):
    role_values = [r.value if isinstance(r, UserRole) else r for r in roles]
    def _dep(user: User = Depends(get_current_user)):
        if user.role.value not in role_values:
            raise ForbiddenError()
        return user
    return _dep

def require_action(action):
    """Dependency that lets through users the access policy allows to perform `action`."""
    from app.services.policy import Actor, ensure_access
    def _dep(user: User = Depends(get_current_user)):
        ensure_access(Actor.from_user(user), action)
        return user
    return _dep
