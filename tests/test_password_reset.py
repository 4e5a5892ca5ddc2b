import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import Update

from app.core.audit import RequestContext
from app.core.errors import InvalidOrExpiredToken
from app.core.ratelimit import limiter
from app.core.security import verify_password
from app.models.password_reset import PasswordReset
from app.models.user import User
from app.services import password_reset

GENERIC = "If your email is registered, you will receive a password reset link"


def _request_token(client, mailer, email):
    r = client.post("/api/auth/forgot-password", json={"email": email})
    assert r.status_code == 200, r.text
    return mailer.sent[-1][1]


def test_forgot_password_sends_link_and_stores_token(client, db, mailer, make_user):
    user = make_user()
    r = client.post("/api/auth/forgot-password", json={"email": user.email})
    assert r.status_code == 200
    assert r.json()["message"] == GENERIC
    assert r.json()["hint"]

    assert len(mailer.sent) == 1
    to_email, token = mailer.sent[0]
    assert to_email == user.email
    assert len(token) == 64

    row = db.query(PasswordReset).filter_by(token=token).one()
    assert row.user_id == user.id
    assert row.used is False


def test_unknown_email_gets_same_answer_and_no_mail(client, mailer, make_user):
    user = make_user()
    known = client.post("/api/auth/forgot-password", json={"email": user.email})
    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@citizens.org"})
    assert unknown.status_code == 200
    assert unknown.json() == known.json()
    assert [to for to, _ in mailer.sent] == [user.email]


def test_mail_failure_surfaces_server_error(client, mailer, make_user):
    user = make_user()
    mailer.fail = True
    r = client.post("/api/auth/forgot-password", json={"email": user.email})
    assert r.status_code == 500
    assert r.json()["detail"] == "Unable to send password reset email"


def test_reset_changes_password(client, mailer, make_user):
    user = make_user()
    token = _request_token(client, mailer, user.email)

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "fresh-password-1"})
    assert r.status_code == 200
    assert r.json()["message"] == "Password has been reset successfully"

    assert client.post("/api/auth/login", json={"email": user.email, "password": "fresh-password-1"}).status_code == 200


def test_token_cannot_be_reused(client, mailer, make_user, password):
    user = make_user()
    token = _request_token(client, mailer, user.email)
    assert client.post("/api/auth/reset-password", json={"token": token, "password": "fresh-password-1"}).status_code == 200

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "another-password-2"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_or_expired_token"
    # the first reset stands
    assert client.post("/api/auth/login", json={"email": user.email, "password": "fresh-password-1"}).status_code == 200


def test_expired_token_is_rejected(client, db, mailer, make_user, password):
    user = make_user()
    token = _request_token(client, mailer, user.email)
    db.query(PasswordReset).filter_by(token=token).update(
        {PasswordReset.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)}
    )
    db.commit()

    r = client.post("/api/auth/reset-password", json={"token": token, "password": "fresh-password-1"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid or expired reset token"
    assert client.post("/api/auth/login", json={"email": user.email, "password": password}).status_code == 200


def test_unknown_token_is_rejected(client):
    r = client.post("/api/auth/reset-password", json={"token": "deadbeef", "password": "fresh-password-1"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_or_expired_token"
    assert "hint" in r.json()


def test_weak_password_is_rejected_before_token_lookup(client, mailer, make_user):
    user = make_user()
    token = _request_token(client, mailer, user.email)
    r = client.post("/api/auth/reset-password", json={"token": token, "password": "short"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Password is too weak"

    # token is still usable
    assert client.post("/api/auth/reset-password", json={"token": token, "password": "long-enough-1"}).status_code == 200


def test_attempts_are_audit_logged(client, mailer, make_user, caplog):
    caplog.set_level(logging.INFO, logger="app.audit")
    user = make_user()
    token = _request_token(client, mailer, user.email)
    client.post("/api/auth/reset-password", json={"token": "bogus", "password": "fresh-password-1"})
    client.post("/api/auth/reset-password", json={"token": token, "password": "fresh-password-1"})

    audit = [r for r in caplog.records if r.name == "app.audit"]
    levels = [r.levelno for r in audit]
    assert levels == [logging.INFO, logging.WARNING, logging.INFO]
    assert "/api/auth/reset-password" in audit[1].getMessage()
    assert "testclient" in audit[2].getMessage()


@pytest.fixture()
def rate_limited():
    limiter.reset()
    limiter.enabled = True
    yield
    limiter.enabled = False
    limiter.reset()


def test_reset_endpoints_are_rate_limited(client, rate_limited):
    for _ in range(3):
        r = client.post("/api/auth/forgot-password", json={"email": "nobody@citizens.org"})
        assert r.status_code == 200
    r = client.post("/api/auth/forgot-password", json={"email": "nobody@citizens.org"})
    assert r.status_code == 429


def test_limiter_follows_ratelimit_setting():
    # RATELIMIT_ENABLED=false in the test environment
    assert limiter.enabled is False


def test_empty_reset_token_is_a_bad_request(client):
    r = client.post("/api/auth/reset-password", json={"token": "", "password": "fresh-password-1"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_concurrent_redemption_has_one_winner(client, mailer, make_user, open_session, monkeypatch):
    user = make_user()
    token = _request_token(client, mailer, user.email)
    winner, loser = open_session(), open_session()

    # the winner redeems between the loser's lookup and its claiming UPDATE
    execute = loser.execute

    def racing_execute(statement, *args, **kwargs):
        if isinstance(statement, Update):
            password_reset.redeem(winner, token, "winner-pass-1", RequestContext())
        return execute(statement, *args, **kwargs)

    monkeypatch.setattr(loser, "execute", racing_execute)
    with pytest.raises(InvalidOrExpiredToken):
        password_reset.redeem(loser, token, "loser-pass-2", RequestContext())

    check = open_session()
    stored = check.get(User, user.id).hashed_password
    assert verify_password("winner-pass-1", stored)
    assert not verify_password("loser-pass-2", stored)
    assert check.query(PasswordReset).filter_by(token=token).one().used is True
