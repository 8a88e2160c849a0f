"""
Tests: owner-side project, scope and deliverable endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest


def _create_project(client, headers, **overrides):
    payload = {"name": "Mobile App", "client_email": "buyer@example.com"}
    payload.update(overrides)
    return client.post("/api/v1/projects", json=payload, headers=headers)


@pytest.fixture()
def api_project(client, auth_headers):
    res = _create_project(client, auth_headers)
    assert res.status_code == 201
    return res.get_json()


# ── Projects ─────────────────────────────────────────────────────────────────


def test_create_project(client, auth_headers, owner):
    res = _create_project(client, auth_headers)

    assert res.status_code == 201
    body = res.get_json()
    assert body["name"] == "Mobile App"
    assert body["status"] == "ACTIVE"
    assert body["owner_id"] == owner.id
    assert body["access_token"]


def test_create_project_validation(client, auth_headers):
    res = _create_project(client, auth_headers, name="")

    assert res.status_code == 400
    assert "name" in res.get_json()["details"]


def test_list_projects(client, auth_headers, api_project):
    res = client.get("/api/v1/projects", headers=auth_headers)

    assert res.status_code == 200
    body = res.get_json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == api_project["id"]
    assert body["items"][0]["latest_scope"] is None


def test_get_project_of_other_owner_is_404(client, api_project, other_owner, bearer_for):
    res = client.get(f"/api/v1/projects/{api_project['id']}", headers=bearer_for(other_owner.id))

    assert res.status_code == 404
    assert res.get_json()["code"] == "NOT_FOUND"


def test_patch_project_status(client, auth_headers, api_project):
    url = f"/api/v1/projects/{api_project['id']}"

    res = client.patch(url, json={"status": "COMPLETED"}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["status"] == "COMPLETED"

    res = client.patch(url, json={"status": "ACTIVE"}, headers=auth_headers)
    assert res.status_code == 409

    res = client.patch(url, json={"status": "BOGUS"}, headers=auth_headers)
    assert res.status_code == 400


def test_list_invoices_empty(client, auth_headers, api_project):
    res = client.get(f"/api/v1/projects/{api_project['id']}/invoices", headers=auth_headers)

    assert res.status_code == 200
    assert res.get_json() == {"items": [], "total": 0}


# ── Scopes ───────────────────────────────────────────────────────────────────


def test_scope_endpoints(client, auth_headers, api_project):
    base = f"/api/v1/projects/{api_project['id']}/scopes"

    res = client.post(base, json={"content": "Phase 1", "price": 1200.5}, headers=auth_headers)
    assert res.status_code == 201
    scope = res.get_json()
    assert scope["version"] == 1
    assert scope["price"] == 1200.5
    assert scope["locked"] is False

    res = client.patch(f"{base}/{scope['id']}", json={"content": "Phase 1b"}, headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["content"] == "Phase 1b"

    res = client.patch(f"{base}/{scope['id']}/lock", headers=auth_headers)
    assert res.status_code == 200
    assert res.get_json()["locked"] is True

    res = client.patch(f"{base}/{scope['id']}/lock", headers=auth_headers)
    assert res.status_code == 200

    res = client.patch(f"{base}/{scope['id']}", json={"price": 1}, headers=auth_headers)
    assert res.status_code == 409
    assert res.get_json()["code"] == "CONFLICT"

    client.post(base, json={"content": "Phase 2", "price": 800}, headers=auth_headers)

    res = client.get(f"{base}/latest", headers=auth_headers)
    assert res.get_json()["scope"]["version"] == 2

    res = client.get(base, headers=auth_headers)
    assert [s["version"] for s in res.get_json()["items"]] == [2, 1]


def test_latest_scope_null(client, auth_headers, api_project):
    res = client.get(f"/api/v1/projects/{api_project['id']}/scopes/latest", headers=auth_headers)

    assert res.status_code == 200
    assert res.get_json() == {"scope": None}


def test_create_scope_negative_price(client, auth_headers, api_project):
    res = client.post(
        f"/api/v1/projects/{api_project['id']}/scopes",
        json={"content": "x", "price": -5},
        headers=auth_headers,
    )

    assert res.status_code == 400
    assert res.get_json()["code"] == "VALIDATION_ERROR"


def test_scope_routes_hidden_from_other_owner(client, api_project, other_owner, bearer_for):
    res = client.post(
        f"/api/v1/projects/{api_project['id']}/scopes",
        json={"content": "intrusion", "price": 1},
        headers=bearer_for(other_owner.id),
    )

    assert res.status_code == 404


def test_unknown_scope_is_404(client, auth_headers, api_project):
    res = client.patch(
        f"/api/v1/projects/{api_project['id']}/scopes/nope/lock", headers=auth_headers,
    )

    assert res.status_code == 404


# ── Deliverables ─────────────────────────────────────────────────────────────


def test_deliverable_endpoints(client, auth_headers, api_project):
    base = f"/api/v1/projects/{api_project['id']}/deliverables"

    res = client.post(base, json={"file_url": "https://cdn.example.com/v1.zip"}, headers=auth_headers)
    assert res.status_code == 201
    body = res.get_json()
    assert body["version"] == 1
    assert body["review_state"] == "PENDING"
    assert body["approvals"] == []

    client.post(base, json={"file_url": "https://cdn.example.com/v2.zip"}, headers=auth_headers)

    res = client.get(base, headers=auth_headers)
    assert [d["version"] for d in res.get_json()["items"]] == [2, 1]


def test_legacy_deliverable_route(client, auth_headers, api_project):
    res = client.post(
        "/api/v1/deliverables",
        json={"project_id": api_project["id"], "file_url": "https://cdn.example.com/a.pdf"},
        headers=auth_headers,
    )

    assert res.status_code == 201
    assert res.get_json()["project_id"] == api_project["id"]


def test_legacy_deliverable_route_requires_project_id(client, auth_headers):
    res = client.post(
        "/api/v1/deliverables",
        json={"file_url": "https://cdn.example.com/a.pdf"},
        headers=auth_headers,
    )

    assert res.status_code == 400
    assert "project_id" in res.get_json()["details"]


@pytest.mark.parametrize("payload", [{}, {"file_url": "not a url"}, {"file_url": ""}])
def test_deliverable_validation(client, auth_headers, api_project, payload):
    res = client.post(
        f"/api/v1/projects/{api_project['id']}/deliverables", json=payload, headers=auth_headers,
    )

    assert res.status_code == 400


@pytest.mark.parametrize("url", ["https://cdn.example.com", "s3://agency-bucket/final/key.pdf"])
def test_deliverable_url_round_trips_unchanged(client, auth_headers, api_project, url):
    base = f"/api/v1/projects/{api_project['id']}/deliverables"

    res = client.post(base, json={"file_url": url}, headers=auth_headers)
    assert res.status_code == 201
    assert res.get_json()["file_url"] == url

    res = client.get(base, headers=auth_headers)
    assert res.get_json()["items"][0]["file_url"] == url


# ── Plan limits ──────────────────────────────────────────────────────────────


def test_fourth_project_after_trial_is_forbidden(client, make_user, bearer_for):
    expired = datetime.now(timezone.utc) - timedelta(days=1)
    user = make_user("lapsed@agency.test", trial_ends_at=expired)
    headers = bearer_for(user.id)
    for n in range(3):
        assert _create_project(client, headers, name=f"P{n}").status_code == 201

    res = _create_project(client, headers, name="P3")

    assert res.status_code == 403
    body = res.get_json()
    assert body["code"] == "FORBIDDEN"
    assert body["error"].startswith("Free Plan Limit Reached")
    assert body["details"]["limit"] == 3
    assert len(client.get("/api/v1/projects", headers=headers).get_json()["items"]) == 3
