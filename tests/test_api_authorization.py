from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi.testclient import TestClient


def create_role(client: TestClient, name: str, permissions: list[str], guard_name: str | None = None) -> str:
    response = client.post("/api/v1/roles", json={"name": name, "permissions": permissions, "guard_name": guard_name})
    response.raise_for_status()
    return response.json()["id"]


def create_org(client: TestClient, name: str, parent_id: str | None = None) -> str:
    response = client.post("/api/v1/containers/organizations", json={"name": name, "parent_id": parent_id})
    response.raise_for_status()
    return response.json()["id"]


def assign_role(client: TestClient, principal_id: str, role: str, context: dict | None = None, **window: str) -> dict:
    payload = {"principal_id": principal_id, "role": role, "context": context, **window}
    response = client.post("/api/v1/assignments/roles", json=payload)
    response.raise_for_status()
    return response.json()


def assign_permission(client: TestClient, principal_id: str, permission: str, context: dict | None = None) -> dict:
    payload = {"principal_id": principal_id, "permission": permission, "context": context}
    response = client.post("/api/v1/assignments/permissions", json=payload)
    response.raise_for_status()
    return response.json()


def authorize(client: TestClient, principal_id: str, permission: str, context: dict | None = None) -> bool:
    response = client.post(
        "/api/v1/authorize",
        json={"principal_id": principal_id, "permission": permission, "context": context},
    )
    response.raise_for_status()
    return response.json()["authorized"]


def authorize_in_org(client: TestClient, principal_id: str, permission: str, org_id: str, check_hierarchy: bool) -> bool:
    response = client.post(
        "/api/v1/authorize/container",
        json={
            "principal_id": principal_id,
            "permission": permission,
            "container_kind": "organization",
            "container_id": org_id,
            "check_hierarchy": check_hierarchy,
        },
    )
    response.raise_for_status()
    return response.json()["authorized"]


def test_grant_check_revoke(client: TestClient) -> None:
    create_role(client, "admin", ["edit-settings"])
    user_id = str(uuid4())

    assert authorize(client, user_id, "edit-settings") is False
    assign_role(client, user_id, "admin")
    assert authorize(client, user_id, "edit-settings") is True

    revoke = client.post("/api/v1/assignments/roles/revoke", json={"principal_id": user_id, "role": "admin"})
    revoke.raise_for_status()
    assert revoke.json() == {"status": "revoked", "removed": 1}
    assert authorize(client, user_id, "edit-settings") is False


def test_direct_permission_and_listing(client: TestClient) -> None:
    client.post("/api/v1/permissions", json={"name": "view-reports"}).raise_for_status()
    project = {"kind": "project", "id": 5}

    created = assign_permission(client, "9", "view-reports", project)
    assert created["permission"] == "view-reports"
    assert created["context"] == {"kind": "project", "id": "5"}

    listed = client.get(
        "/api/v1/assignments/permissions",
        params={"principal_id": "9", "context_type": "project", "context_id": "5"},
    ).json()
    assert [item["id"] for item in listed] == [created["id"]]

    assert authorize(client, "9", "view-reports", project) is True
    assert authorize(client, "9", "view-reports") is False

    revoke = client.post(
        "/api/v1/assignments/permissions/revoke",
        json={"principal_id": "9", "permission": "view-reports", "context": project},
    )
    assert revoke.json()["removed"] == 1
    assert authorize(client, "9", "view-reports", project) is False


def test_time_bounded_role(client: TestClient) -> None:
    create_role(client, "contractor", ["deploy"])
    now = datetime.now(timezone.utc)
    assign_role(
        client,
        "3",
        "contractor",
        activated_at=(now + timedelta(days=1)).isoformat(),
        expired_at=(now + timedelta(days=10)).isoformat(),
    )
    assign_role(
        client,
        "4",
        "contractor",
        activated_at=(now - timedelta(days=10)).isoformat(),
        expired_at=(now - timedelta(days=1)).isoformat(),
    )

    assert authorize(client, "3", "deploy") is False
    assert authorize(client, "4", "deploy") is False


def test_inverted_window_is_rejected(client: TestClient) -> None:
    create_role(client, "contractor", ["deploy"])
    now = datetime.now(timezone.utc)
    response = client.post(
        "/api/v1/assignments/roles",
        json={
            "principal_id": "3",
            "role": "contractor",
            "activated_at": now.isoformat(),
            "expired_at": (now - timedelta(hours=1)).isoformat(),
        },
    )
    assert response.status_code == 400


def test_unknown_role_is_not_found(client: TestClient) -> None:
    response = client.post("/api/v1/assignments/roles", json={"principal_id": "3", "role": "ghost"})
    assert response.status_code == 404


def test_root_role_bypasses_checks(client: TestClient) -> None:
    assign_role(client, "1", "root")

    assert authorize(client, "1", "any-permission") is True
    assert authorize(client, "1", "anything", {"kind": "project", "id": "x"}) is True


def test_hierarchy_aware_check(client: TestClient) -> None:
    a = create_org(client, "A")
    b = create_org(client, "B", a)
    c = create_org(client, "C", b)
    client.post("/api/v1/permissions", json={"name": "view"}).raise_for_status()
    assign_permission(client, "5", "view", {"kind": "organization", "id": a})

    assert authorize_in_org(client, "5", "view", c, check_hierarchy=True) is True
    assert authorize_in_org(client, "5", "view", c, check_hierarchy=False) is False
    assert authorize_in_org(client, "6", "view", c, check_hierarchy=True) is False


def test_container_check_errors(client: TestClient) -> None:
    a = create_org(client, "A")
    b = create_org(client, "B", a)

    missing = client.post(
        "/api/v1/authorize/container",
        json={"principal_id": "5", "permission": "view", "container_kind": "organization", "container_id": str(uuid4())},
    )
    assert missing.status_code == 404

    wrong_kind = client.post(
        "/api/v1/authorize/container",
        json={"principal_id": "5", "permission": "view", "container_kind": "partner", "container_id": b},
    )
    assert wrong_kind.status_code == 404

    bad_kind = client.post(
        "/api/v1/authorize/container",
        json={"principal_id": "5", "permission": "view", "container_kind": "team", "container_id": b},
    )
    assert bad_kind.status_code == 400


def test_role_check_and_batch(client: TestClient) -> None:
    create_role(client, "editor", ["edit", "publish"])
    assign_role(client, "8", "editor", {"kind": "site", "id": "blog"})
    site = {"kind": "site", "id": "blog"}

    role_check = client.post("/api/v1/authorize/role", json={"principal_id": "8", "role": "editor", "context": site})
    assert role_check.json() == {"authorized": True}
    global_check = client.post("/api/v1/authorize/role", json={"principal_id": "8", "role": "editor"})
    assert global_check.json() == {"authorized": False}

    def batch(permissions: list[str], mode: str) -> bool:
        response = client.post(
            "/api/v1/authorize/batch",
            json={"principal_id": "8", "permissions": permissions, "mode": mode, "context": site},
        )
        response.raise_for_status()
        return response.json()["authorized"]

    assert batch(["edit", "publish"], "all") is True
    assert batch(["edit", "delete"], "all") is False
    assert batch(["edit", "delete"], "any") is True

    for mode in ("any", "all"):
        empty = client.post(
            "/api/v1/authorize/batch",
            json={"principal_id": "nobody", "permissions": [], "mode": mode},
        )
        assert empty.status_code == 400


def test_guard_scoped_check(client: TestClient) -> None:
    create_role(client, "admin", ["tokens.issue"], guard_name="api")
    client.post(
        "/api/v1/assignments/roles",
        json={"principal_id": "2", "role": "admin", "guard_name": "api"},
    ).raise_for_status()

    api_check = client.post(
        "/api/v1/authorize",
        json={"principal_id": "2", "permission": "tokens.issue", "guard_name": "api"},
    )
    assert api_check.json()["authorized"] is True
    assert authorize(client, "2", "tokens.issue") is False


def test_health(client: TestClient) -> None:
    assert client.get("/healthz").json()["status"] == "ok"
    assert client.get("/readyz").status_code == 200


def test_container_context_is_canonicalised(client: TestClient) -> None:
    org = create_org(client, "Acme")
    client.post("/api/v1/permissions", json={"name": "view"}).raise_for_status()

    created = assign_permission(client, "5", "view", {"kind": "organization", "id": org.upper()})
    assert created["context"] == {"kind": "organization", "id": org}

    assert authorize_in_org(client, "5", "view", org, check_hierarchy=False) is True
    assert authorize(client, "5", "view", {"kind": "organization", "id": org.upper()}) is True

    revoke = client.post(
        "/api/v1/assignments/permissions/revoke",
        json={"principal_id": "5", "permission": "view", "context": {"kind": "organization", "id": org.upper()}},
    )
    assert revoke.json()["removed"] == 1


def test_grant_on_unknown_container_is_not_found(client: TestClient) -> None:
    create_role(client, "auditor", ["view"])

    for container_id in (str(uuid4()), "not-a-uuid"):
        response = client.post(
            "/api/v1/assignments/roles",
            json={"principal_id": "5", "role": "auditor", "context": {"kind": "partner", "id": container_id}},
        )
        assert response.status_code == 404
    assert client.get("/api/v1/assignments/roles", params={"principal_id": "5"}).json() == []
