"""
Tests: public client portal — token access view and approval decisions.

Includes the full agency flow: project → scope → lock → deliverable →
client view → approval → draft invoice.
"""

import pytest

from scopeflow.models.deliverable import ApprovalAuditLog
from scopeflow.models.invoice import Invoice
from scopeflow.services import deliverable_service


@pytest.fixture()
def deliverable(project):
    return deliverable_service.create_deliverable(
        project.id, {"file_url": "https://files.example.com/final.pdf"},
    )


def _approve_url(deliverable_id):
    return f"/api/v1/client/deliverables/{deliverable_id}/approve"


def test_end_to_end_agency_flow(client, auth_headers):
    res = client.post(
        "/api/v1/projects",
        json={"name": "Acme Rebrand", "client_email": "cto@acme.example.com"},
        headers=auth_headers,
    )
    assert res.status_code == 201
    project = res.get_json()
    token = project["access_token"]
    base = f"/api/v1/projects/{project['id']}"

    res = client.post(f"{base}/scopes", json={"content": "v1 scope", "price": 1000},
                      headers=auth_headers)
    s1 = res.get_json()
    assert s1["version"] == 1
    assert s1["locked"] is False

    res = client.patch(f"{base}/scopes/{s1['id']}/lock", headers=auth_headers)
    assert res.get_json()["locked"] is True

    res = client.post(f"{base}/deliverables", json={"file_url": "https://x/file.pdf"},
                      headers=auth_headers)
    d1 = res.get_json()
    assert d1["version"] == 1

    res = client.get(f"/api/v1/client/access/{token}")
    assert res.status_code == 200
    view = res.get_json()
    assert view["project"]["id"] == project["id"]
    assert [s["id"] for s in view["scopes"]] == [s1["id"]]
    assert [d["id"] for d in view["deliverables"]] == [d1["id"]]
    assert view["deliverables"][0]["approvals"] == []

    res = client.post(
        _approve_url(d1["id"]),
        json={"action": "APPROVE", "comments": "looks good"},
        headers={"X-Client-Token": token},
    )
    assert res.status_code == 201
    entry = res.get_json()
    assert entry["action"] == "APPROVE"
    assert entry["comments"] == "looks good"
    assert entry["invoice"]["amount"] == 1000

    res = client.get(f"{base}/invoices", headers=auth_headers)
    invoices = res.get_json()["items"]
    assert len(invoices) == 1
    assert invoices[0]["amount"] == 1000
    assert invoices[0]["status"] == "DRAFT"

    res = client.get(f"/api/v1/client/access/{token}")
    portal_deliverable = res.get_json()["deliverables"][0]
    assert portal_deliverable["review_state"] == "APPROVED"
    assert len(portal_deliverable["approvals"]) == 1


def test_portal_view_hides_access_token(client, project):
    res = client.get(f"/api/v1/client/access/{project.access_token}")

    assert res.status_code == 200
    assert "access_token" not in res.get_json()["project"]
    assert res.headers["Cache-Control"] == "no-store"


def test_unknown_access_token_is_404(client, project):
    res = client.get("/api/v1/client/access/definitely-not-a-token")

    assert res.status_code == 404
    body = res.get_json()
    assert body["code"] == "NOT_FOUND"
    assert "definitely-not-a-token" not in body["error"]


def test_decision_without_token_is_401(client, deliverable):
    res = client.post(_approve_url(deliverable.id), json={"action": "APPROVE"})

    assert res.status_code == 401
    assert res.get_json()["code"] == "UNAUTHORIZED"


def test_decision_with_wrong_token_is_403(client, deliverable):
    res = client.post(
        _approve_url(deliverable.id),
        json={"action": "APPROVE"},
        headers={"X-Client-Token": "guess"},
    )

    assert res.status_code == 403
    assert res.get_json()["code"] == "FORBIDDEN"
    assert ApprovalAuditLog.query.count() == 0
    assert Invoice.query.count() == 0


def test_decision_on_unknown_deliverable_is_403(client, project):
    res = client.post(
        _approve_url("does-not-exist"),
        json={"action": "APPROVE"},
        headers={"X-Client-Token": project.access_token},
    )

    assert res.status_code == 403


def test_decision_with_invalid_action_is_400(client, project, deliverable):
    res = client.post(
        _approve_url(deliverable.id),
        json={"action": "MAYBE"},
        headers={"X-Client-Token": project.access_token},
    )

    assert res.status_code == 400
    assert "action" in res.get_json()["details"]


def test_request_changes_via_portal(client, project, deliverable):
    res = client.post(
        _approve_url(deliverable.id),
        json={"action": "REQUEST_CHANGES", "comments": "Swap the logo"},
        headers={"X-Client-Token": project.access_token, "User-Agent": "ClientBrowser/1.0"},
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["invoice"] is None
    assert body["user_agent"] == "ClientBrowser/1.0"
    assert Invoice.query.count() == 0


def test_decision_records_forwarded_ip(client, project, deliverable):
    res = client.post(
        _approve_url(deliverable.id),
        json={"action": "APPROVE"},
        headers={
            "X-Client-Token": project.access_token,
            "X-Forwarded-For": "198.51.100.20, 10.0.0.1",
        },
    )

    assert res.get_json()["ip_address"] == "198.51.100.20"


def test_portal_needs_no_bearer(client, project, deliverable):
    res = client.post(
        _approve_url(deliverable.id),
        json={"action": "APPROVE"},
        headers={"X-Client-Token": project.access_token, "Authorization": "Bearer junk"},
    )

    assert res.status_code == 201
