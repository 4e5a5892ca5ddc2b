# File: app/core/audit.py
"""
Audit trail for the password-reset endpoints.

Every attempt is written to the "app.audit" logger together with the caller's
IP, user agent and endpoint. Successful attempts log at INFO, failed ones at
WARNING and unexpected errors at ERROR as suspicious activity.
"""
import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request

audit_logger = logging.getLogger("app.audit")


@dataclass
class RequestContext:
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    endpoint: Optional[str] = None


def request_context(request: Request) -> RequestContext:
    return RequestContext(
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        endpoint=request.url.path,
    )


def _record(ctx: RequestContext, **extra: Any) -> str:
    data = {"timestamp": datetime.now(timezone.utc).isoformat(), **asdict(ctx), **extra}
    return json.dumps(data, default=str)


def log_password_reset_attempt(ctx: RequestContext, success: bool, message: str, user_id: Optional[int] = None):
    record = _record(ctx, success=success, message=message, user_id=user_id)
    if success:
        audit_logger.info("Password reset attempt %s", record)
    else:
        audit_logger.warning("Failed password reset attempt %s", record)


def log_suspicious_activity(ctx: RequestContext, activity: str, details: dict):
    audit_logger.error("Suspicious activity detected %s", _record(ctx, activity=activity, details=details))
