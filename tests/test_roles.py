from __future__ import annotations

from fastapi.testclient import TestClient


def test_role_create_and_list(client: TestClient) -> None:
    response = client.post(
        "/api/v1/roles",
        json={"name": "admin", "label": "Administrators", "permissions": ["edit-settings", "view-reports"]},
        headers={"X-Actor-Id": "ops"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["guard_name"] == "web"
    assert body["permissions"] == ["edit-settings", "view-reports"]

    roles = client.get("/api/v1/roles").json()
    assert [role["name"] for role in roles] == ["admin", "root"]

    permissions = client.get("/api/v1/permissions").json()
    assert {permission["name"] for permission in permissions} == {"edit-settings", "view-reports"}


def test_role_name_unique_per_guard(client: TestClient) -> None:
    client.post("/api/v1/roles", json={"name": "admin"}).raise_for_status()

    duplicate = client.post("/api/v1/roles", json={"name": "admin"})
    assert duplicate.status_code == 409

    other_guard = client.post("/api/v1/roles", json={"name": "admin", "guard_name": "api"})
    assert other_guard.status_code == 201

    api_roles = client.get("/api/v1/roles", params={"guard_name": "api"}).json()
    assert [role["guard_name"] for role in api_roles] == ["api"]


def test_role_update_replaces_permissions(client: TestClient) -> None:
    role_id = client.post("/api/v1/roles", json={"name": "auditor", "permissions": ["view"]}).json()["id"]

    response = client.patch(f"/api/v1/roles/{role_id}", json={"label": "Auditors", "permissions": ["export"]})
    response.raise_for_status()
    assert response.json()["label"] == "Auditors"
    assert response.json()["permissions"] == ["export"]

    fetched = client.get(f"/api/v1/roles/{role_id}").json()
    assert fetched["permissions"] == ["export"]


def test_role_delete_revokes_its_assignments(client: TestClient) -> None:
    role_id = client.post("/api/v1/roles", json={"name": "admin", "permissions": ["edit"]}).json()["id"]
    client.post("/api/v1/assignments/roles", json={"principal_id": "1", "role": "admin"}).raise_for_status()

    delete_resp = client.delete(f"/api/v1/roles/{role_id}")
    assert delete_resp.status_code == 204

    assert client.get(f"/api/v1/roles/{role_id}").status_code == 404
    assert client.get("/api/v1/assignments/roles", params={"principal_id": "1"}).json() == []
    decision = client.post("/api/v1/authorize", json={"principal_id": "1", "permission": "edit"})
    assert decision.json() == {"authorized": False}


def test_permission_crud(client: TestClient) -> None:
    response = client.post("/api/v1/permissions", json={"name": "reports.export", "label": "Export reports"})
    assert response.status_code == 201
    permission_id = response.json()["id"]

    assert client.post("/api/v1/permissions", json={"name": "reports.export"}).status_code == 409

    assert client.delete(f"/api/v1/permissions/{permission_id}").status_code == 204
    assert client.delete(f"/api/v1/permissions/{permission_id}").status_code == 404
    assert client.get("/api/v1/permissions").json() == []


def test_role_validation_errors(client: TestClient) -> None:
    response = client.post("/api/v1/roles", json={"name": ""})
    assert response.status_code == 400
    assert response.json()["detail"][0]["loc"][-1] == "name"


def test_mutations_are_audited(client: TestClient) -> None:
    client.post("/api/v1/roles", json={"name": "admin"}, headers={"X-Actor-Id": "ops"}).raise_for_status()

    entries = client.get("/api/v1/audit-logs", params={"action": "role.create"}).json()
    assert len(entries) == 1
    assert entries[0]["actor_id"] == "ops"
    assert entries[0]["details"]["name"] == "admin"
