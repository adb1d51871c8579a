from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from rbac_engine.models.container import Organization, Partner
from rbac_engine.models.refs import ContextRef, PrincipalRef
from rbac_engine.schemas.permission import PermissionCreate
from rbac_engine.schemas.role import RoleCreate
from rbac_engine.services.assignments import AssignmentService
from rbac_engine.services.authorization import AuthorizationService
from rbac_engine.services.errors import ContainerNotFoundError, CycleDetectedError
from rbac_engine.services.roles import RoleService

NOW = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)
USER = PrincipalRef(type="user", id="42")


@pytest.fixture()
def roles(session) -> RoleService:
    return RoleService(session)


@pytest.fixture()
def grants(session) -> AssignmentService:
    return AssignmentService(session)


@pytest.fixture()
def authz(session) -> AuthorizationService:
    return AuthorizationService(session, clock=lambda: NOW)


def org_chain(session):
    """Org A is the root, B its child, C the grandchild."""

    a = Organization(name="Org A")
    session.add(a)
    session.flush()
    b = Organization(name="Org B", parent_id=a.id)
    session.add(b)
    session.flush()
    c = Organization(name="Org C", parent_id=b.id)
    session.add(c)
    session.flush()
    return a, b, c


def test_permission_through_role_and_revocation(roles, grants, authz) -> None:
    roles.create_role(RoleCreate(name="admin", permissions=["edit-settings"]), actor_id=None)
    grants.assign_role(USER, "admin")

    assert authz.has_permission(USER, "edit-settings") is True

    assert grants.revoke_role(USER, "admin") == 1
    assert authz.has_permission(USER, "edit-settings") is False


def test_direct_permission(roles, grants, authz) -> None:
    roles.create_permission(PermissionCreate(name="view-reports"), actor_id=None)
    grants.assign_permission(USER, "view-reports")

    assert authz.has_permission(USER, "view-reports") is True
    assert authz.has_permission(PrincipalRef(type="user", id="43"), "view-reports") is False


def test_principal_type_is_part_of_identity(roles, grants, authz) -> None:
    roles.create_permission(PermissionCreate(name="deploy"), actor_id=None)
    grants.assign_permission(PrincipalRef(type="service", id="42"), "deploy")

    assert authz.has_permission(PrincipalRef(type="service", id="42"), "deploy") is True
    assert authz.has_permission(USER, "deploy") is False


def test_future_permission_is_not_active(session, roles, grants, authz) -> None:
    roles.create_permission(PermissionCreate(name="future-permission"), actor_id=None)
    grants.assign_permission(USER, "future-permission", None, NOW + timedelta(days=1), NOW + timedelta(days=30))

    assert authz.has_permission(USER, "future-permission") is False

    later = AuthorizationService(session, clock=lambda: NOW + timedelta(days=2))
    assert later.has_permission(USER, "future-permission") is True


def test_expired_grants_do_not_count(roles, grants, authz) -> None:
    roles.create_role(RoleCreate(name="temp", permissions=["expired-permission"]), actor_id=None)
    grants.assign_role(USER, "temp", None, NOW - timedelta(days=30), NOW - timedelta(days=1))
    grants.assign_permission(USER, "expired-permission", None, NOW - timedelta(days=30), NOW - timedelta(days=1))

    assert authz.has_role(USER, "temp") is False
    assert authz.has_permission(USER, "expired-permission") is False


def test_context_match_is_exact(session, roles, grants, authz) -> None:
    roles.create_role(RoleCreate(name="manager", permissions=["approve"]), actor_id=None)
    project = ContextRef(kind="project", id="p-1")
    grants.assign_role(USER, "manager", project)

    assert authz.has_role(USER, "manager", project) is True
    assert authz.has_role(USER, "manager") is False
    assert authz.has_permission(USER, "approve", project) is True
    assert authz.has_permission(USER, "approve") is False
    assert authz.has_permission(USER, "approve", ContextRef(kind="project", id="p-2")) is False
    assert authz.has_permission(USER, "approve", ContextRef(kind="site", id="p-1")) is False


def test_global_grant_does_not_satisfy_contextual_query(roles, grants, authz) -> None:
    roles.create_permission(PermissionCreate(name="export"), actor_id=None)
    grants.assign_permission(USER, "export")

    assert authz.has_permission(USER, "export", ContextRef(kind="project", id="p-1")) is False


def test_root_bypasses_every_check(session, roles, grants, authz) -> None:
    roles.ensure_root_role()
    grants.assign_role(USER, "root")
    org_a, _, org_c = org_chain(session)

    assert authz.is_root(USER) is True
    assert authz.has_permission(USER, "any-permission") is True
    assert authz.has_permission(USER, "another-permission", ContextRef(kind="project", id="x")) is True
    assert authz.has_permission_in_container(USER, "anything", org_c, check_hierarchy=False) is True


def test_contextual_root_role_is_not_root(session, roles, grants, authz) -> None:
    roles.ensure_root_role()
    grants.assign_role(USER, "root", ContextRef(kind="project", id="p-1"))

    assert authz.is_root(USER) is False
    assert authz.has_permission(USER, "any-permission") is False


def test_expired_root_role_is_not_root(roles, grants, authz) -> None:
    roles.ensure_root_role()
    grants.assign_role(USER, "root", None, None, NOW - timedelta(seconds=1))

    assert authz.has_permission(USER, "any-permission") is False


def test_hierarchy_walk_up(session, roles, grants, authz) -> None:
    org_a, org_b, org_c = org_chain(session)
    roles.create_permission(PermissionCreate(name="view"), actor_id=None)
    grants.assign_permission(USER, "view", org_a)

    assert authz.has_permission_in_container(USER, "view", org_c, check_hierarchy=True) is True
    assert authz.has_permission_in_container(USER, "view", org_c, check_hierarchy=False) is False
    assert authz.has_permission_in_container(USER, "view", org_a, check_hierarchy=False) is True


def test_hierarchy_never_walks_down(session, roles, grants, authz) -> None:
    org_a, org_b, org_c = org_chain(session)
    roles.create_role(RoleCreate(name="team-lead", permissions=["view"]), actor_id=None)
    grants.assign_role(USER, "team-lead", org_c)

    assert authz.has_permission_in_container(USER, "view", org_c) is True
    assert authz.has_permission_in_container(USER, "view", org_b) is False
    assert authz.has_permission_in_container(USER, "view", org_a) is False


def test_container_by_id_requires_known_container(session, authz) -> None:
    org_a, *_ = org_chain(session)

    assert authz.has_permission_in_container(USER, "view", str(org_a.id), kind="organization") is False
    with pytest.raises(ContainerNotFoundError):
        authz.has_permission_in_container(USER, "view", str(org_a.id), kind="partner")


def test_partner_grant_does_not_leak_into_organizations(session, roles, grants, authz) -> None:
    org_a, *_ = org_chain(session)
    partner = Partner(id=org_a.id, name="Mirror Partner")
    session.add(partner)
    session.flush()
    roles.create_permission(PermissionCreate(name="view"), actor_id=None)
    grants.assign_permission(USER, "view", partner)

    assert authz.has_permission_in_container(USER, "view", partner) is True
    assert authz.has_permission_in_container(USER, "view", org_a) is False


def test_cycle_fails_closed(session, roles, grants, authz) -> None:
    org_a, org_b, org_c = org_chain(session)
    org_a.parent_id = org_c.id
    session.flush()
    roles.create_permission(PermissionCreate(name="view"), actor_id=None)

    with pytest.raises(CycleDetectedError):
        authz.has_permission_in_container(USER, "view", org_c)


def test_any_and_all_permissions(roles, grants, authz) -> None:
    for name in ("edit-settings", "view-reports"):
        roles.create_permission(PermissionCreate(name=name), actor_id=None)
        grants.assign_permission(USER, name)

    assert authz.has_all_permissions(USER, ["edit-settings", "view-reports"]) is True
    assert authz.has_any_permission(USER, ["edit-settings", "non-existent"]) is True
    assert authz.has_all_permissions(USER, ["edit-settings", "non-existent"]) is False
    assert authz.has_any_permission(USER, ["non-existent"]) is False
    assert authz.has_any_permission(USER, []) is False
    assert authz.has_all_permissions(USER, []) is True


def test_guards_are_separate_realms(roles, grants, authz) -> None:
    roles.create_role(RoleCreate(name="admin", guard_name="api", permissions=["tokens.issue"]), actor_id=None)
    grants.assign_role(USER, "admin", guard="api")

    assert authz.has_permission(USER, "tokens.issue", guard="api") is True
    assert authz.has_permission(USER, "tokens.issue") is False


def test_membership(session, grants, authz) -> None:
    org_a, *_ = org_chain(session)

    assert authz.is_member_of(USER, org_a) is False
    grants.join_container(USER, org_a, "analyst")
    assert authz.is_member_of(USER, org_a) is True
    assert authz.is_member_of(USER, str(org_a.id), kind="organization") is True


def test_role_on_distant_ancestor(session, roles, grants, authz) -> None:
    org_a, org_b, org_c = org_chain(session)
    roles.create_role(RoleCreate(name="director", permissions=["approve"]), actor_id=None)
    grants.assign_role(USER, "director", org_a)

    assert authz.has_permission_in_container(USER, "approve", str(org_c.id), kind="organization") is True
    assert authz.has_permission_in_container(USER, "approve", org_b, check_hierarchy=False) is False
    assert authz.has_permission(USER, "approve", ContextRef(kind="organization", id=str(org_a.id).upper())) is True
