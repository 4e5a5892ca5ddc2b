# app/services/notify_email.py

import logging
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache
from typing import Callable, Optional

import resend

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)

# ===================================================================
# BASE TEMPLATE
# ===================================================================

TPL_BASE = """
<table width="100%%" cellpadding="0" cellspacing="0" style="background:#f1f5f9;padding:24px;">
  <tr><td align="center">
    <table width="600" cellpadding="0" cellspacing="0"
           style="background:#ffffff;border-radius:10px;padding:24px;
                  font-family:Arial,Helvetica,sans-serif;color:#0f172a;
                  border:1px solid #e2e8f0;">
      <tr>
        <td align="center" style="padding-bottom:14px;">
          <div style="font-size:20px;font-weight:700;">Citizen Complaints</div>
          <div style="margin-top:2px;font-size:12px;color:#64748b;">
            Report it. Track it. Get it fixed.
          </div>
        </td>
      </tr>
      <tr>
        <td style="font-size:14px;line-height:1.6;">
          %s
        </td>
      </tr>
      <tr>
        <td style="padding-top:14px;font-size:11px;color:#64748b;border-top:1px solid #e2e8f0;">
          <div>
            This is an automated message from <strong>Citizen Complaints</strong>.
            If you did not request this, you can safely ignore this email.
          </div>
          {CONTACT_SECTION}
          <div style="margin-top:4px;">&copy; {YEAR} Citizen Complaints</div>
        </td>
      </tr>
    </table>
  </td></tr>
</table>
"""


def _render(body: str, contact: Optional[str]) -> str:
    contact_section = ""
    if contact:
        contact_section = f"""
          <div style="margin-top:4px;">
            For help, contact us at
            <a href="mailto:{contact}" style="color:#1e3a8a;text-decoration:none;">{contact}</a>.
          </div>
        """
    base = TPL_BASE.replace("{CONTACT_SECTION}", contact_section)
    base = base.replace("{YEAR}", str(datetime.now(timezone.utc).year))
    return base % body


def _build_url(base: str, path: str) -> str:
    """
    Build a full URL from the configured frontend base.
    Falls back to a site-relative path when no base is configured.
    """
    base = (base or "").strip().rstrip("/")
    path = path.lstrip("/")

    if base:
        if not base.startswith("http://") and not base.startswith("https://"):
            base = f"https://{base}"
        return f"{base}/{path}" if path else base

    return f"/{path}" if path else "/"


def _format_link_section(link: str, link_text: str = "Open link") -> str:
    """Primary button plus the full URL for copy-paste."""
    return f"""
    <div style="margin:12px 0 8px 0;text-align:left;">
      <a href="{link}"
         style="display:inline-block;padding:10px 20px;background:#1d4ed8;
                color:#ffffff;border-radius:6px;font-weight:600;
                text-decoration:none;font-size:14px;">
        {link_text}
      </a>
    </div>
    <div style="margin:6px 0 0 0;font-size:11px;color:#374151;
                background:#f3f4f6;padding:8px 10px;border-radius:4px;
                word-break:break-all;font-family:monospace;">
      <strong>Or copy and paste this link:</strong><br/>{link}
    </div>
    """


# ===================================================================
# Transports: each takes (to, subject, html) and raises on failure
# ===================================================================

Transport = Callable[[str, str, str], None]


def _sender(cfg: Settings) -> str:
    return f"{cfg.email_from_name} <{cfg.email_from_address}>" if cfg.email_from_name else cfg.email_from_address


def _smtp_transport(cfg: Settings) -> Transport:
    if not cfg.smtp_host or not cfg.smtp_username or not cfg.smtp_password or not cfg.email_from_address:
        raise RuntimeError("SMTP is not configured")

    def send(to_email: str, subject: str, html: str):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = _sender(cfg)
        msg["To"] = to_email
        msg.attach(MIMEText(html, "html"))

        if cfg.smtp_use_ssl:
            server = smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=15)
        else:
            server = smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=15)
        try:
            if not cfg.smtp_use_ssl:
                server.starttls()
            server.login(cfg.smtp_username, cfg.smtp_password)
            server.send_message(msg)
        finally:
            server.quit()

    return send


def _resend_transport(cfg: Settings) -> Transport:
    if not cfg.resend_api_key or not cfg.email_from_address:
        raise RuntimeError("Resend is not configured")
    resend.api_key = cfg.resend_api_key

    def send(to_email: str, subject: str, html: str):
        resend.Emails.send({
            "from": _sender(cfg),
            "to": [to_email],
            "subject": subject,
            "html": html,
        })

    return send


def _console_transport(cfg: Settings) -> Transport:
    def send(to_email: str, subject: str, html: str):
        logger.info(f"[console mail] to={to_email} subject={subject!r}\n{html}")

    return send


TRANSPORTS = {
    "smtp": _smtp_transport,
    "resend": _resend_transport,
    "console": _console_transport,
}


class Mailer:
    """Sends templated emails through the configured provider.

    The transport is built on first use and reused afterwards.
    """

    def __init__(self, cfg: Settings = settings):
        self.cfg = cfg
        self._transport: Optional[Transport] = None

    def _get_transport(self) -> Transport:
        if self._transport is None:
            provider = (self.cfg.email_provider or "smtp").lower()
            factory = TRANSPORTS.get(provider)
            if factory is None:
                raise RuntimeError(f"Unknown email provider: {provider}")
            self._transport = factory(self.cfg)
        return self._transport

    def send(self, to_email: str, subject: str, body: str) -> bool:
        try:
            self._get_transport()(to_email, subject, _render(body, self.cfg.email_from_address))
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}", exc_info=True)
            return False

    def send_reset_password(self, to_email: str, token: str) -> bool:
        link = _build_url(self.cfg.frontend_base_url, f"reset-password?token={token}")
        body = f"""
        <p>Hello,</p>
        <p>We received a request to reset the password for your
           <strong>Citizen Complaints</strong> account.</p>
        <p>To create a new password, please use the link below:</p>
        {_format_link_section(link, "Reset password")}
        <p style="margin-top:8px;font-size:12px;color:#6b7280;">
          For your security, this link is valid for <strong>{self.cfg.password_reset_ttl_minutes} minutes</strong>.
          If you did not request a password reset, you can ignore this email.
        </p>
        """
        return self.send(to_email, "Reset your password", body)


@lru_cache
def get_mailer() -> Mailer:
    return Mailer(settings)
