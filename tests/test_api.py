"""HTTP tests for the patient API (in-memory store, no database)."""

API = "/api/v1"


def _form(**overrides):
    body = {
        "firstName": "Nina",
        "lastName": "Huber",
        "dob": "1992-07-30",
        "email": "nina.huber@example.com",
        "mobile": "+41795550555",
        "inviteMode": "profileAndInvite",
    }
    body.update(overrides)
    return body


def _issue_paths(response):
    return {issue["path"]: issue["kind"] for issue in response.json()["issues"]}


def test_health(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["store"] == "memory"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def test_list_returns_core_views(client):
    response = client.get(f"{API}/patients")
    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body] == ["P-1001", "P-1002", "P-1003", "P-1004", "P-1005"]
    assert body[0] == {
        "id": "P-1001",
        "name": "Alice Müller",
        "birthDate": "1988-06-12",
        "email": "alice@example.com",
        "mobile": "+41795550111",
        "status": "active",
    }


def test_list_search_matches_name_email_and_mobile(client):
    assert [p["id"] for p in client.get(f"{API}/patients", params={"q": "STEINER"}).json()] == ["P-1002"]
    assert [p["id"] for p in client.get(f"{API}/patients", params={"q": "keita.smith@"}).json()] == ["P-1003"]
    assert [p["id"] for p in client.get(f"{API}/patients", params={"q": "5550333"}).json()] == ["P-1004"]


def test_archived_patients_hidden_by_default(client):
    client.post(f"{API}/patients/P-1003/archive")

    visible = [p["id"] for p in client.get(f"{API}/patients").json()]
    assert "P-1003" not in visible

    everyone = client.get(f"{API}/patients", params={"include_archived": "true"}).json()
    archived = next(p for p in everyone if p["id"] == "P-1003")
    assert archived["status"] == "inactive"


def test_export_csv(client):
    response = client.get(f"{API}/patients/export.csv")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.split("\n")
    assert lines[0] == "id,name,birthDate,email,mobile,language,active"
    assert len(lines) == 6


# ---------------------------------------------------------------------------
# Single patient
# ---------------------------------------------------------------------------

def test_get_patient_returns_fhir_resource(client):
    body = client.get(f"{API}/patients/P-1001").json()
    assert body["resourceType"] == "Patient"
    assert body["telecom"][0] == {"system": "email", "value": "alice@example.com", "use": "home"}
    assert body["communication"] == [{"language": {"text": "de-CH"}, "preferred": True}]


def test_unknown_patient_is_404(client):
    assert client.get(f"{API}/patients/P-404").status_code == 404
    assert client.get(f"{API}/patients/P-404/view").status_code == 404
    assert client.put(f"{API}/patients/P-404", json=_form()).status_code == 404
    assert client.post(f"{API}/patients/P-404/archive").status_code == 404


def test_view_and_form(client):
    assert client.get(f"{API}/patients/P-1002/view").json()["name"] == "Marc Steiner"
    form = client.get(f"{API}/patients/P-1002/form").json()
    assert form["firstName"] == "Marc"
    assert form["lastName"] == "Steiner"
    assert form["inviteMode"] == "profileOnly"


# ---------------------------------------------------------------------------
# Create / import / update
# ---------------------------------------------------------------------------

def test_create_patient(client, repository):
    response = client.post(f"{API}/patients", json=_form(createdBy="user-1"))
    assert response.status_code == 201

    body = response.json()
    assert body["id"].startswith("P-")
    assert body["name"][0]["text"] == "Nina Huber"
    assert body["active"] is True
    assert body["communication"][0]["language"]["text"] == "de-CH"
    assert {"url": "https://qicu.app/fhir/StructureDefinition/invitation", "valueString": "sent"} in body["extension"]
    assert repository.get(body["id"]) is not None


def test_create_treats_blank_contacts_as_absent(client):
    body = client.post(f"{API}/patients", json=_form(email="  ", mobile="")).json()
    assert body["telecom"] == []


def test_create_rejects_future_and_ancient_birth_dates(client):
    future = client.post(f"{API}/patients", json=_form(dob="2999-01-01"))
    assert future.status_code == 400
    assert _issue_paths(future) == {"dob": "invalid"}

    ancient = client.post(f"{API}/patients", json=_form(dob="1890-05-01"))
    assert ancient.status_code == 400

    impossible = client.post(f"{API}/patients", json=_form(dob="2023-02-30"))
    assert impossible.status_code == 400


def test_create_rejects_non_ascii_and_newline_birth_dates(client):
    for dob in ("١٩٩٢-٠٧-٣٠", "1992-07-30\n"):
        response = client.post(f"{API}/patients", json=_form(dob=dob))
        assert response.status_code == 400
        assert _issue_paths(response) == {"dob": "invalid"}


def test_create_reports_every_form_problem(client):
    body = _form(firstName="   ", inviteMode="sometimes")
    del body["lastName"]
    response = client.post(f"{API}/patients", json=body)

    assert response.status_code == 400
    assert _issue_paths(response) == {"firstName": "invalid", "lastName": "missing", "inviteMode": "enum"}


def test_import_fhir_patient(client):
    payload = {
        "resourceType": "Patient",
        "id": "P-2001",
        "name": [{"given": ["Jonas"], "family": "Meier"}],
        "telecom": [{"system": "phone", "value": "+41445550101", "use": "work"}],
    }
    response = client.post(f"{API}/patients/fhir", json=payload)
    assert response.status_code == 201

    view = client.get(f"{API}/patients/P-2001/view").json()
    assert view["name"] == "Jonas Meier"
    assert view["mobile"] is None


def test_import_invalid_fhir_patient_lists_issues(client):
    payload = {"resourceType": "Patient", "id": "P-2002", "telecom": [{"system": "Email", "value": "x"}]}
    response = client.post(f"{API}/patients/fhir", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid FHIR Patient payload"
    assert _issue_paths(response) == {"name": "missing", "telecom.0.system": "enum"}


def test_import_existing_id_conflicts(client):
    existing = client.get(f"{API}/patients/P-1001").json()
    assert client.post(f"{API}/patients/fhir", json=existing).status_code == 409


def test_update_patient_keeps_id(client):
    response = client.put(f"{API}/patients/P-1004", json=_form(inviteMode="profileOnly"))
    assert response.status_code == 200

    body = response.json()
    assert body["id"] == "P-1004"
    assert body["name"][0]["text"] == "Nina Huber"
    assert body["meta"]["versionId"] == "1"
    assert client.get(f"{API}/patients/P-1004/view").json()["email"] == "nina.huber@example.com"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def test_archive_unarchive_history(client):
    archived = client.post(f"{API}/patients/P-1005/archive", json={"reason": "moved away"}).json()
    assert archived["active"] is False

    restored = client.post(f"{API}/patients/P-1005/unarchive").json()
    assert restored["active"] is True
    assert len(restored["extension"]) == 3

    events = client.get(f"{API}/patients/P-1005/history").json()
    assert [e["kind"] for e in events] == ["archived", "unarchived"]
    assert events[0]["reason"] == "moved away"


def test_delete_patient(client):
    assert client.delete(f"{API}/patients/P-1001").status_code == 204
    assert client.get(f"{API}/patients/P-1001").status_code == 404
    assert client.delete(f"{API}/patients/P-1001").status_code == 404
