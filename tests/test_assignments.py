from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from rbac_engine.models.container import Organization
from rbac_engine.models.refs import ContextRef, PrincipalRef
from rbac_engine.schemas.role import RoleCreate
from rbac_engine.services.assignments import AssignmentService
from rbac_engine.services.audit import AuditService
from rbac_engine.services.errors import (
    AlreadyMemberError,
    ContainerNotFoundError,
    InvalidAssignmentError,
    PermissionNotFoundError,
    RoleConflictError,
    RoleNotFoundError,
)
from rbac_engine.services.roles import RoleService

USER = PrincipalRef(type="user", id="7")
PROJECT = ContextRef(kind="project", id="p-9")


@pytest.fixture()
def grants(session) -> AssignmentService:
    return AssignmentService(session)


@pytest.fixture()
def editor(session):
    return RoleService(session).create_role(RoleCreate(name="editor", permissions=["edit"]), actor_id="admin")


def test_every_grant_inserts_a_row(grants, editor) -> None:
    first = grants.assign_role(USER, "editor")
    second = grants.assign_role(USER, editor)

    assert first.id != second.id
    assert len(grants.list_role_assignments(principal=USER)) == 2


def test_revoke_removes_overlapping_grants(grants, editor) -> None:
    now = datetime.now(timezone.utc)
    grants.assign_role(USER, "editor")
    grants.assign_role(USER, "editor", None, now - timedelta(days=5), now - timedelta(days=1))
    grants.assign_role(USER, "editor", PROJECT)

    assert grants.revoke_role(USER, "editor") == 2
    remaining = grants.list_role_assignments(principal=USER)
    assert [assignment.context for assignment in remaining] == [PROJECT]


def test_revoke_without_matches_returns_zero(grants, editor) -> None:
    assert grants.revoke_role(USER, "editor", PROJECT) == 0


def test_permission_grant_and_revoke(grants, editor) -> None:
    grants.assign_permission(USER, "edit", PROJECT)

    listed = grants.list_permission_assignments(principal=USER, context=PROJECT)
    assert len(listed) == 1
    assert listed[0].permission.name == "edit"
    assert grants.revoke_permission(USER, "edit", PROJECT) == 1
    assert grants.list_permission_assignments(principal=USER) == []


def test_unknown_role_or_permission(grants) -> None:
    with pytest.raises(RoleNotFoundError):
        grants.assign_role(USER, "ghost")
    with pytest.raises(PermissionNotFoundError):
        grants.assign_permission(USER, "ghost")


def test_role_lookup_is_scoped_to_guard(grants, editor) -> None:
    with pytest.raises(RoleNotFoundError):
        grants.assign_role(USER, "editor", guard="api")


def test_inverted_window_is_rejected(grants, editor) -> None:
    now = datetime.now(timezone.utc)
    with pytest.raises(InvalidAssignmentError):
        grants.assign_role(USER, "editor", None, now, now - timedelta(minutes=1))


def test_naive_window_is_stored_as_utc(grants, editor) -> None:
    assignment = grants.assign_role(USER, "editor", None, datetime(2026, 1, 1, 8, 30))

    assert assignment.activated_at == datetime(2026, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_container_is_a_context(session, grants, editor) -> None:
    org = Organization(name="Acme")
    session.add(org)
    session.flush()

    assignment = grants.assign_role(USER, "editor", org)

    assert assignment.context == ContextRef(kind="organization", id=str(org.id))


def test_membership_lifecycle(session, grants) -> None:
    org = Organization(name="Acme")
    session.add(org)
    session.flush()

    membership = grants.join_container(USER, org, "engineer")
    assert membership.position == "engineer"
    assert membership.is_active is True

    with pytest.raises(AlreadyMemberError):
        grants.join_container(USER, str(org.id), kind="organization")

    assert [member.principal_id for member in grants.list_members(org)] == ["7"]
    assert grants.leave_container(USER, org) == 1
    assert grants.list_members(org) == []


def test_writes_are_audited(session, grants, editor) -> None:
    grants.assign_role(USER, "editor", PROJECT, actor_id="admin")
    grants.revoke_role(USER, "editor", PROJECT, actor_id="admin")

    audit = AuditService(session)
    created = audit.list(action="role_assignment.create")
    deleted = audit.list(action="role_assignment.delete")

    assert len(created) == 1
    assert created[0].actor_id == "admin"
    assert created[0].subject_id == "7"
    assert created[0].details["context_type"] == "project"
    assert deleted[0].details["removed"] == 1
    assert audit.list(action="role.create")[0].details["name"] == "editor"


def test_container_context_must_exist(session, grants, editor) -> None:
    org = Organization(name="Acme")
    session.add(org)
    session.flush()

    assignment = grants.assign_role(USER, "editor", ContextRef(kind="organization", id=str(org.id).upper()))
    assert assignment.context == ContextRef(kind="organization", id=str(org.id))

    with pytest.raises(ContainerNotFoundError):
        grants.assign_permission(USER, "edit", ContextRef(kind="organization", id=str(uuid4())))
    with pytest.raises(ContainerNotFoundError):
        grants.assign_role(USER, "editor", ContextRef(kind="partner", id=str(org.id)))


def test_conflict_keeps_earlier_writes(session, grants, editor) -> None:
    roles = RoleService(session)
    grants.assign_role(USER, "editor")

    with pytest.raises(RoleConflictError):
        roles.create_role(RoleCreate(name="editor"), actor_id=None)

    org = Organization(name="Acme")
    session.add(org)
    session.flush()
    grants.join_container(USER, org)
    with pytest.raises(AlreadyMemberError):
        grants.join_container(USER, org)

    assert len(grants.list_role_assignments(principal=USER)) == 1
    assert len(grants.list_members(org)) == 1


def test_role_id_is_checked_against_explicit_guard(session, grants, editor) -> None:
    with pytest.raises(RoleNotFoundError):
        grants.assign_role(USER, editor.id, guard="api")
    with pytest.raises(PermissionNotFoundError):
        grants.assign_permission(USER, str(editor.permissions[0].id), guard="api")

    assert grants.assign_role(USER, str(editor.id), guard="web").role_id == editor.id
