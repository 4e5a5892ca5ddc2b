# File: app/core/ratelimit.py
# Project: citizen-complaints-backend

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

# default_limits apply to every route through SlowAPIMiddleware
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.ratelimit_default],
)
# slowapi reads RATELIMIT_ENABLED from the environment itself and keeps the raw
# string, so "false" would stay truthy; take the parsed setting instead
limiter.enabled = settings.ratelimit_enabled

PASSWORD_RESET_LIMIT_MESSAGE = "Too many password reset attempts, please try again later."
