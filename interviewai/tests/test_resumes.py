"""Tests for /api/resumes and the single-default invariant"""
import pytest
from sqlalchemy.exc import IntegrityError

from interviewai.app.models.resume import Resume


def _create(client, headers, payload, **overrides):
    r = client.post("/api/resumes", json={**payload, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _defaults(client, headers):
    resumes = client.get("/api/resumes", headers=headers).json()["data"]
    return [r["id"] for r in resumes if r["isDefault"]]


def test_resumes_require_auth(client):
    assert client.get("/api/resumes").status_code == 401


def test_create_and_get_resume(client, auth_headers, resume_payload, test_user):
    created = _create(client, auth_headers, resume_payload)
    assert created["userId"] == test_user.id
    assert created["title"] == "Backend Resume"
    assert created["isDefault"] is False
    assert created["experience"][0]["achievements"] == ["Reduced latency by 40%"]

    r = client.get(f"/api/resumes/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["personalDetails"]["name"] == "Test User"


def test_create_requires_title_and_contact(client, auth_headers):
    r = client.post(
        "/api/resumes",
        json={"title": "No contact", "personalDetails": {"name": "X"}},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Please provide title and personal details (name, email)"


def test_list_is_newest_first(client, auth_headers, resume_payload):
    first = _create(client, auth_headers, resume_payload, title="First")
    second = _create(client, auth_headers, resume_payload, title="Second")
    r = client.get("/api/resumes", headers=auth_headers)
    data = r.json()
    assert data["count"] == 2
    assert [x["id"] for x in data["data"]] == [second["id"], first["id"]]


def test_partial_update_keeps_other_fields(client, auth_headers, resume_payload):
    created = _create(client, auth_headers, resume_payload)
    r = client.put(f"/api/resumes/{created['id']}", json={"skills": ["Go"]}, headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["skills"] == ["Go"]
    assert data["title"] == "Backend Resume"
    assert data["introduction"].startswith("Backend engineer")


def test_other_users_resume_is_404(client, auth_headers, other_headers, resume_payload):
    created = _create(client, other_headers, resume_payload)
    r = client.get(f"/api/resumes/{created['id']}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Resume not found"


def test_set_default_leaves_exactly_one(client, auth_headers, resume_payload):
    ids = [_create(client, auth_headers, resume_payload, title=f"R{i}")["id"] for i in range(3)]
    for target in (ids[0], ids[2], ids[1], ids[1]):
        r = client.put(f"/api/resumes/{target}/default", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["data"]["isDefault"] is True
        assert _defaults(client, auth_headers) == [target]


def test_create_with_default_clears_previous(client, auth_headers, resume_payload):
    first = _create(client, auth_headers, resume_payload, isDefault=True)
    second = _create(client, auth_headers, resume_payload, isDefault=True)
    assert _defaults(client, auth_headers) == [second["id"]]
    assert first["id"] != second["id"]


def test_update_with_default_clears_previous(client, auth_headers, resume_payload):
    first = _create(client, auth_headers, resume_payload, isDefault=True)
    second = _create(client, auth_headers, resume_payload)
    r = client.put(f"/api/resumes/{second['id']}", json={"isDefault": True}, headers=auth_headers)
    assert r.status_code == 200
    assert _defaults(client, auth_headers) == [second["id"]]
    assert first["id"] not in _defaults(client, auth_headers)


def test_defaults_are_per_user(client, auth_headers, other_headers, resume_payload):
    mine = _create(client, auth_headers, resume_payload, isDefault=True)
    theirs = _create(client, other_headers, resume_payload, isDefault=True)
    assert _defaults(client, auth_headers) == [mine["id"]]
    assert _defaults(client, other_headers) == [theirs["id"]]


def test_delete_default_leaves_no_default(client, auth_headers, resume_payload):
    keep = _create(client, auth_headers, resume_payload)
    default = _create(client, auth_headers, resume_payload, isDefault=True)
    r = client.delete(f"/api/resumes/{default['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Resume deleted successfully"
    remaining = client.get("/api/resumes", headers=auth_headers).json()["data"]
    assert [x["id"] for x in remaining] == [keep["id"]]
    assert _defaults(client, auth_headers) == []


def test_store_rejects_two_defaults(db_session, test_user):
    db_session.add(Resume(user_id=test_user.id, title="A", personal_details={}, is_default=True))
    db_session.commit()
    db_session.add(Resume(user_id=test_user.id, title="B", personal_details={}, is_default=True))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
