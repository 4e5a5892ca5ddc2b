from app.models.user import UserRole


def test_admin_creates_and_lists_agencies(client, make_user, auth):
    admin = make_user(UserRole.admin)
    r = client.post("/api/agencies", json={"name": "Water Board", "description": "Pipes and leaks"}, headers=auth(admin))
    assert r.status_code == 201
    assert r.json()["name"] == "Water Board"

    r = client.post("/api/agencies", json={"name": "Parks"}, headers=auth(admin))
    assert r.status_code == 201

    r = client.get("/api/agencies", params={"search": "pipes"}, headers=auth(admin))
    assert r.status_code == 200
    assert [a["name"] for a in r.json()["data"]] == ["Water Board"]
    assert r.json()["meta"]["total"] == 1


def test_duplicate_agency_name_conflicts(client, make_user, make_agency, auth):
    admin = make_user(UserRole.admin)
    make_agency("Water Board")
    r = client.post("/api/agencies", json={"name": "Water Board"}, headers=auth(admin))
    assert r.status_code == 400
    assert r.json()["error"] == "conflict"


def test_directory_writes_are_admin_only(client, make_user, make_agency, auth):
    agency = make_agency()
    agency_admin = make_user(UserRole.agency_admin, agency=agency)
    citizen = make_user()

    assert client.post("/api/agencies", json={"name": "New One"}, headers=auth(agency_admin)).status_code == 403
    assert client.post("/api/categories", json={"name": "Noise", "agency_id": agency.id},
                       headers=auth(agency_admin)).status_code == 403
    # citizens cannot even read the directory
    assert client.get("/api/agencies", headers=auth(citizen)).status_code == 403
    assert client.get("/api/agencies", headers=auth(agency_admin)).status_code == 200


def test_agency_lists_staff_and_categories(client, make_user, make_agency, make_category, auth):
    admin = make_user(UserRole.admin)
    agency = make_agency("Roads")
    staff = make_user(UserRole.agency_staff, agency=agency)
    make_category(agency, "Potholes")

    r = client.get(f"/api/agencies/{agency.id}", headers=auth(admin))
    assert r.status_code == 200
    body = r.json()
    assert [s["id"] for s in body["staff"]] == [staff.id]
    assert [c["name"] for c in body["categories"]] == ["Potholes"]


def test_agency_delete_blocked_by_staff_then_categories(client, db, make_user, make_agency, make_category, auth):
    admin = make_user(UserRole.admin)
    agency = make_agency()
    staff = make_user(UserRole.agency_staff, agency=agency)
    category = make_category(agency)

    r = client.delete(f"/api/agencies/{agency.id}", headers=auth(admin))
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot delete agency with assigned staff"

    assert client.delete(f"/api/agencies/{agency.id}/staff/{staff.id}", headers=auth(admin)).status_code == 200
    r = client.delete(f"/api/agencies/{agency.id}", headers=auth(admin))
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot delete agency with assigned categories"

    assert client.delete(f"/api/categories/{category.id}", headers=auth(admin)).status_code == 200
    r = client.delete(f"/api/agencies/{agency.id}", headers=auth(admin))
    assert r.status_code == 200
    assert client.get(f"/api/agencies/{agency.id}", headers=auth(admin)).status_code == 404


def test_staff_lifecycle(client, make_user, make_agency, auth):
    admin = make_user(UserRole.admin)
    roads = make_agency("Roads")
    parks = make_agency("Parks")

    r = client.post(
        f"/api/agencies/{roads.id}/staff",
        json={"name": "Sam Field", "email": "sam@roads-dept.org", "password": "field-work-1", "role": "agency_admin"},
        headers=auth(admin),
    )
    assert r.status_code == 201
    staff_id = r.json()["id"]
    assert r.json()["role"] == "agency_admin"

    r = client.post(f"/api/agencies/{parks.id}/staff/{staff_id}", headers=auth(admin))
    assert r.status_code == 200

    # not assigned to roads any more
    r = client.delete(f"/api/agencies/{roads.id}/staff/{staff_id}", headers=auth(admin))
    assert r.status_code == 400

    r = client.delete(f"/api/agencies/{parks.id}/staff/{staff_id}", headers=auth(admin))
    assert r.status_code == 200
    assert r.json()["role"] == "citizen"


def test_staff_creation_rejects_non_staff_role(client, make_user, make_agency, auth):
    admin = make_user(UserRole.admin)
    agency = make_agency()
    r = client.post(
        f"/api/agencies/{agency.id}/staff",
        json={"name": "Not Staff", "email": "ns@citizens.org", "password": "long-enough-1", "role": "citizen"},
        headers=auth(admin),
    )
    assert r.status_code == 400


def test_assigning_a_citizen_as_staff_is_rejected(client, make_user, make_agency, auth):
    admin = make_user(UserRole.admin)
    agency = make_agency()
    citizen = make_user()
    r = client.post(f"/api/agencies/{agency.id}/staff/{citizen.id}", headers=auth(admin))
    assert r.status_code == 400


def test_category_crud_and_uniqueness(client, make_user, make_agency, auth):
    admin = make_user(UserRole.admin)
    roads = make_agency("Roads")
    parks = make_agency("Parks")

    r = client.post("/api/categories", json={"name": "Lighting", "agency_id": roads.id}, headers=auth(admin))
    assert r.status_code == 201
    category_id = r.json()["id"]
    assert r.json()["agency"] == {"id": roads.id, "name": "Roads"}

    # same name in the same agency
    r = client.post("/api/categories", json={"name": "Lighting", "agency_id": roads.id}, headers=auth(admin))
    assert r.status_code == 400
    # same name under another agency is fine
    r = client.post("/api/categories", json={"name": "Lighting", "agency_id": parks.id}, headers=auth(admin))
    assert r.status_code == 201

    r = client.post("/api/categories", json={"name": "Orphan", "agency_id": 9999}, headers=auth(admin))
    assert r.status_code == 404

    r = client.put(f"/api/categories/{category_id}", json={"description": "Street lights"}, headers=auth(admin))
    assert r.status_code == 200
    assert r.json()["description"] == "Street lights"

    r = client.get("/api/categories", params={"agency_id": parks.id}, headers=auth(admin))
    assert r.json()["meta"]["total"] == 1


def test_category_in_use_cannot_be_deleted_or_moved(client, make_user, make_agency, make_category,
                                                    file_complaint, auth):
    admin = make_user(UserRole.admin)
    roads = make_agency("Roads")
    parks = make_agency("Parks")
    category = make_category(roads)
    file_complaint(make_user(), category)

    r = client.delete(f"/api/categories/{category.id}", headers=auth(admin))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_state"

    r = client.put(f"/api/categories/{category.id}", json={"agency_id": parks.id}, headers=auth(admin))
    assert r.status_code == 400


def test_public_category_catalogue(client, make_agency, make_category):
    roads = make_agency("Roads")
    make_category(roads, "Potholes")
    make_category(roads, "Lighting")

    r = client.get("/api/public/categories")
    assert r.status_code == 200
    assert [c["name"] for c in r.json()] == ["Lighting", "Potholes"]
    assert r.json()[0]["agency"] == {"id": roads.id, "name": "Roads"}
