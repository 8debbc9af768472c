"""
Organization and membership tests.

Creation, joining, admin-only membership assignment and tenant isolation.
"""

import uuid

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import auth, create_org, join_org, signup
from orgboard.main import app
from orgboard.models.activity_log import ActivityLog
from orgboard.models.member import OrgMember, OrgRole
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.services import organization_service
from orgboard.services.membership_service import MembershipResolver


# ---------------------------------------------------------------------------
# Create / List / Get
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_creator_is_sole_admin(client):
    user, token = await signup(client, "creator")
    org = await create_org(client, token, "Acme")
    assert org["name"] == "Acme"

    resp = await client.get(f"/api/v1/organizations/{org['id']}/members", headers=auth(token))
    assert resp.status_code == 200
    members = resp.json()["members"]
    assert len(members) == 1
    assert members[0]["user_id"] == user["id"]
    assert members[0]["role"] == "admin"


@pytest.mark.asyncio
async def test_create_org_strips_name_and_rejects_blank(client):
    _, token = await signup(client, "blank")
    org = await create_org(client, token, "  Acme  ")
    assert org["name"] == "Acme"

    resp = await client.post("/api/v1/organizations", json={"name": "   "}, headers=auth(token))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_org_requires_auth(client):
    resp = await client.post("/api/v1/organizations", json={"name": "Acme"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_my_organizations_with_role(client):
    _, alice = await signup(client, "alice")
    _, bob = await signup(client, "bob")
    acme = await create_org(client, alice, "Acme")
    globex = await create_org(client, bob, "Globex")
    assert (await join_org(client, alice, globex["id"])).status_code == 201

    resp = await client.get("/api/v1/organizations", headers=auth(alice))
    assert resp.status_code == 200
    roles = {o["id"]: o["role"] for o in resp.json()["organizations"]}
    assert roles == {acme["id"]: "admin", globex["id"]: "member"}


@pytest.mark.asyncio
async def test_get_organization_includes_caller_role(client):
    _, alice = await signup(client, "alice")
    _, bob = await signup(client, "bob")
    org = await create_org(client, alice)
    await join_org(client, bob, org["id"])

    admin_view = await client.get(f"/api/v1/organizations/{org['id']}", headers=auth(alice))
    member_view = await client.get(f"/api/v1/organizations/{org['id']}", headers=auth(bob))
    assert admin_view.json()["user_role"] == "admin"
    assert member_view.json()["user_role"] == "member"


@pytest.mark.asyncio
async def test_get_organization_non_member_forbidden(client):
    _, alice = await signup(client, "alice")
    _, mallory = await signup(client, "mallory")
    org = await create_org(client, alice)

    resp = await client.get(f"/api/v1/organizations/{org['id']}", headers=auth(mallory))
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "NOT_A_MEMBER"


@pytest.mark.asyncio
async def test_get_missing_organization_not_found(client):
    _, token = await signup(client, "missing")
    resp = await client.get(f"/api/v1/organizations/{uuid.uuid4()}", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "ORG_NOT_FOUND"


# ---------------------------------------------------------------------------
# Join
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_join_creates_member_row(client):
    _, alice = await signup(client, "alice")
    bob_user, bob = await signup(client, "bob")
    org = await create_org(client, alice)

    resp = await join_org(client, bob, org["id"])
    assert resp.status_code == 201
    body = resp.json()
    assert body["user_id"] == bob_user["id"]
    assert body["org_id"] == org["id"]
    assert body["role"] == "member"


@pytest.mark.asyncio
async def test_join_twice_conflict(client):
    _, alice = await signup(client, "alice")
    _, bob = await signup(client, "bob")
    org = await create_org(client, alice)

    assert (await join_org(client, bob, org["id"])).status_code == 201
    second = await join_org(client, bob, org["id"])
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "ALREADY_MEMBER"

    members = await client.get(f"/api/v1/organizations/{org['id']}/members", headers=auth(alice))
    assert members.json()["total"] == 2


@pytest.mark.asyncio
async def test_creator_join_own_org_conflict(client):
    _, alice = await signup(client, "alice")
    org = await create_org(client, alice)
    resp = await join_org(client, alice, org["id"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_join_missing_org_not_found(client):
    _, token = await signup(client, "nojoin")
    resp = await join_org(client, token, str(uuid.uuid4()))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_membership_rejected_by_database(db_session):
    user = User(email="dup@example.com", password_hash="x")
    org = Organization(name="Acme")
    db_session.add_all([user, org])
    await db_session.flush()

    db_session.add(OrgMember(org_id=org.id, user_id=user.id, role=OrgRole.admin))
    await db_session.flush()

    db_session.add(OrgMember(org_id=org.id, user_id=user.id, role=OrgRole.member))
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


# ---------------------------------------------------------------------------
# Assign membership
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_assigns_membership_with_role(client):
    _, alice = await signup(client, "alice")
    carol, carol_token = await signup(client, "carol")
    org = await create_org(client, alice)

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"user_id": carol["id"], "role": "admin"},
        headers=auth(alice),
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "admin"

    detail = await client.get(f"/api/v1/organizations/{org['id']}", headers=auth(carol_token))
    assert detail.json()["user_role"] == "admin"


@pytest.mark.asyncio
async def test_assign_defaults_to_member_role(client):
    _, alice = await signup(client, "alice")
    carol, _ = await signup(client, "carol")
    org = await create_org(client, alice)

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"user_id": carol["id"]},
        headers=auth(alice),
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "member"


@pytest.mark.asyncio
async def test_member_cannot_assign_membership(client):
    _, alice = await signup(client, "alice")
    _, bob = await signup(client, "bob")
    carol, _ = await signup(client, "carol")
    org = await create_org(client, alice)
    await join_org(client, bob, org["id"])

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"user_id": carol["id"]},
        headers=auth(bob),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_assign_without_user_id_bad_request(client):
    _, alice = await signup(client, "alice")
    org = await create_org(client, alice)

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"role": "member"},
        headers=auth(alice),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "USER_ID_REQUIRED"


@pytest.mark.asyncio
async def test_assign_unknown_user_not_found(client):
    _, alice = await signup(client, "alice")
    org = await create_org(client, alice)

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"user_id": str(uuid.uuid4())},
        headers=auth(alice),
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_assign_existing_member_conflict(client):
    _, alice = await signup(client, "alice")
    bob_user, bob = await signup(client, "bob")
    org = await create_org(client, alice)
    await join_org(client, bob, org["id"])

    resp = await client.post(
        f"/api/v1/organizations/{org['id']}/members",
        json={"user_id": bob_user["id"], "role": "admin"},
        headers=auth(alice),
    )
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cannot_list_other_org_members(client):
    _, alice = await signup(client, "alice")
    _, mallory = await signup(client, "mallory")
    org = await create_org(client, alice)
    await create_org(client, mallory, "Evil Corp")

    resp = await client.get(f"/api/v1/organizations/{org['id']}/members", headers=auth(mallory))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_join_race_maps_constraint_violation_to_conflict(client, session_factory, monkeypatch):
    _, alice = await signup(client, "alice")
    bob_user, bob = await signup(client, "bob")
    org = await create_org(client, alice)
    assert (await join_org(client, bob, org["id"])).status_code == 201

    # A concurrent join that read "not a member" before the first insert committed.
    async def stale_lookup(self, user_id, org_id):
        return None

    monkeypatch.setattr(MembershipResolver, "get_membership", stale_lookup)
    resp = await join_org(client, bob, org["id"])
    monkeypatch.undo()

    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ALREADY_MEMBER"

    async with session_factory() as session:
        rows = await session.execute(
            select(func.count()).select_from(OrgMember).where(
                OrgMember.org_id == uuid.UUID(org["id"]),
                OrgMember.user_id == uuid.UUID(bob_user["id"]),
            )
        )
        assert rows.scalar_one() == 1


@pytest.mark.asyncio
async def test_create_org_is_atomic_when_admin_membership_fails(client, session_factory, monkeypatch):
    _, alice = await signup(client, "alice")

    # Admin row pointing at a user that does not exist fails the foreign key.
    def dangling_member(**kwargs):
        return OrgMember(**{**kwargs, "user_id": uuid.uuid4()})

    monkeypatch.setattr(organization_service, "OrgMember", dangling_member)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as failing_client:
        resp = await failing_client.post(
            "/api/v1/organizations", json={"name": "Acme"}, headers=auth(alice)
        )
    monkeypatch.undo()

    assert resp.status_code == 500

    async with session_factory() as session:
        orgs = await session.execute(select(func.count()).select_from(Organization))
        assert orgs.scalar_one() == 0
        entries = await session.execute(select(func.count()).select_from(ActivityLog))
        assert entries.scalar_one() == 0

    listing = await client.get("/api/v1/organizations", headers=auth(alice))
    assert listing.json()["total"] == 0
