import jwt

from app.core.security import make_token
from app.models.user import UserRole


def test_register_returns_token_and_user(client, password):
    r = client.post("/api/auth/register", json={"name": "Ana Silva", "email": "Ana@Citizens.org", "password": password})
    assert r.status_code == 201
    body = r.json()
    assert body["token"]
    assert body["user"]["email"] == "ana@citizens.org"
    assert body["user"]["role"] == "citizen"
    assert "hashed_password" not in body["user"]


def test_duplicate_register_is_rejected(client, password):
    payload = {"name": "Ana Silva", "email": "ana@citizens.org", "password": password}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 400
    assert r.json() == {"detail": "User already exists", "error": "conflict"}


def test_self_register_as_staff_is_forbidden(client, password):
    r = client.post(
        "/api/auth/register",
        json={"name": "Sneaky", "email": "sneaky@citizens.org", "password": password, "role": "admin"},
    )
    assert r.status_code == 403


def test_short_password_fails_validation(client):
    r = client.post("/api/auth/register", json={"name": "Ana", "email": "ana@citizens.org", "password": "short"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"
    assert "password" in r.json()["detail"]


def test_malformed_email_is_a_bad_request(client, password):
    r = client.post("/api/auth/register", json={"name": "Ana", "email": "not-an-email", "password": password})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_login_success_stamps_last_login(client, make_user, password):
    user = make_user()
    r = client.post("/api/auth/login", json={"email": user.email, "password": password})
    assert r.status_code == 200
    token = r.json()["token"]

    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == user.email
    assert r.json()["last_login"] is not None


def test_wrong_password_and_unknown_email_look_the_same(client, make_user, password):
    user = make_user()
    wrong = client.post("/api/auth/login", json={"email": user.email, "password": "not-the-password"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@citizens.org", "password": password})
    assert wrong.status_code == unknown.status_code == 400
    assert wrong.json() == unknown.json()


def test_deactivated_account_cannot_log_in(client, db, make_user, password):
    user = make_user()
    user.is_active = False
    db.commit()
    r = client.post("/api/auth/login", json={"email": user.email, "password": password})
    assert r.status_code == 403


def test_profile_requires_token(client):
    r = client.get("/api/auth/profile")
    assert r.status_code == 401
    assert r.json()["detail"] == "No token, authorization denied"


def test_tampered_and_expired_tokens_are_rejected(client, make_user):
    user = make_user()
    forged = jwt.encode({"sub": str(user.id), "role": "admin", "exp": 9999999999}, "an-entirely-different-signing-secret-value", algorithm="HS256")
    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401

    expired = make_token(user.id, user.role.value, ttl=-10)
    r = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Token expired"


def test_profile_includes_agency_for_staff(client, make_user, make_agency, auth):
    agency = make_agency("Roads Department")
    staff = make_user(UserRole.agency_staff, agency=agency)
    r = client.get("/api/auth/profile", headers=auth(staff))
    assert r.status_code == 200
    assert r.json()["agency"] == {"id": agency.id, "name": "Roads Department"}


def test_citizen_profile_update(client, make_user, auth):
    user = make_user()
    r = client.put("/api/citizens/profile", json={"name": "New Name", "password": "brand-new-pass"}, headers=auth(user))
    assert r.status_code == 200
    assert r.json()["name"] == "New Name"
    assert client.post("/api/auth/login", json={"email": user.email, "password": "brand-new-pass"}).status_code == 200


def test_citizen_profile_email_must_be_unique(client, make_user, auth):
    first = make_user()
    second = make_user()
    r = client.put("/api/citizens/profile", json={"email": first.email}, headers=auth(second))
    assert r.status_code == 400


def test_admin_manages_citizens(client, make_user, auth):
    admin = make_user(UserRole.admin)
    citizen = make_user(name="Maria Lopez")
    make_user(name="John Doe")

    r = client.get("/api/citizens", params={"search": "maria"}, headers=auth(admin))
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["data"]] == [citizen.id]

    r = client.delete(f"/api/citizens/{citizen.id}", headers=auth(admin))
    assert r.status_code == 200

    r = client.get(f"/api/citizens/{citizen.id}", headers=auth(admin))
    assert r.json()["is_active"] is False

    # a deactivated user's existing token stops working
    assert client.get("/api/auth/profile", headers=auth(citizen)).status_code == 403


def test_citizen_admin_routes_reject_non_admins(client, make_user, auth):
    citizen = make_user()
    assert client.get("/api/citizens", headers=auth(citizen)).status_code == 403
