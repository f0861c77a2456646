import pytest

from jangbigo import models

API = "/api/v1/communities"


def join(client, headers, community_id):
    return client.post(f"{API}/join", json={"communityId": community_id}, headers=headers)


def invite(client, headers, community_id, user_id, role=None):
    body = {"communityId": community_id, "userId": user_id}
    if role:
        body["role"] = role
    return client.post(f"{API}/invite", json=body, headers=headers)


def set_role(client, headers, community_id, user_id, role):
    return client.put(f"{API}/{community_id}/members/role", json={"userId": user_id, "role": role}, headers=headers)


# --- create / read / update / delete ---

def test_create_makes_caller_owner(client, make_user):
    owner, headers = make_user()
    r = client.post(API, json={"title": "Incheon Ladder Guild", "maxMembers": 50}, headers=headers)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["slug"] == "incheon-ladder-guild"
    assert data["status"] == "ACTIVE"
    assert data["isPrivate"] is False
    assert data["memberCount"] == 1

    members = client.get(f"{API}/{data['id']}/members", headers=headers).json()["data"]
    assert [(m["userId"], m["role"]) for m in members] == [(owner.id, "OWNER")]


def test_slug_falls_back_when_title_has_no_ascii(client, make_user):
    _, headers = make_user()
    r = client.post(API, json={"title": "서울 크레인"}, headers=headers)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["slug"].startswith("community-")


def test_duplicate_slug_conflicts(client, make_user):
    _, headers = make_user()
    assert client.post(API, json={"title": "Crew", "slug": "crew"}, headers=headers).status_code == 201
    r = client.post(API, json={"title": "Other crew", "slug": "crew"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["data"]["errors"] == [{"field": "slug", "message": "Community slug already exists"}]


@pytest.mark.parametrize(
    "body, field",
    [
        ({"title": "X", "slug": "Bad Slug"}, "slug"),
        ({"title": "X", "maxMembers": 0}, "maxMembers"),
        ({"title": "X", "defaultWorkFee": 101}, "defaultWorkFee"),
        ({"title": ""}, "title"),
    ],
)
def test_create_validation(client, make_user, body, field):
    _, headers = make_user()
    r = client.post(API, json=body, headers=headers)
    assert r.status_code == 400
    assert field in [e["field"] for e in r.json()["data"]["errors"]]


def test_list_filters_and_member_counts(client, make_user, make_community):
    _, a_headers = make_user()
    b, b_headers = make_user()
    public_id = make_community(a_headers, title="Daegu Sky Team")
    make_community(a_headers, title="Hidden Crew", isPrivate=True)
    assert join(client, b_headers, public_id).status_code == 201

    everything = client.get(API, headers=b_headers).json()["data"]
    assert len(everything) == 2

    public = client.get(API, params={"isPrivate": "false"}, headers=b_headers).json()["data"]
    assert [(c["id"], c["memberCount"]) for c in public] == [(public_id, 2)]

    found = client.get(API, params={"search": "daegu"}, headers=b_headers).json()["data"]
    assert [c["id"] for c in found] == [public_id]


def test_get_missing_community_is_404(client, make_user):
    _, headers = make_user()
    r = client.get(f"{API}/999", headers=headers)
    assert r.status_code == 404
    assert r.json()["status"] == 404


def test_update_requires_owner_or_admin(client, make_user, make_community):
    _, owner_headers = make_user()
    member, member_headers = make_user()
    community_id = make_community(owner_headers)
    join(client, member_headers, community_id)

    r = client.put(f"{API}/{community_id}", json={"title": "Renamed"}, headers=member_headers)
    assert r.status_code == 403

    assert set_role(client, owner_headers, community_id, member.id, "ADMIN").status_code == 200
    r = client.put(f"{API}/{community_id}", json={"title": "Renamed", "defaultWorkFee": 3}, headers=member_headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["title"] == "Renamed"
    assert r.json()["data"]["defaultWorkFee"] == 3


def test_only_owner_deletes(client, make_user, make_community, db_session):
    _, owner_headers = make_user()
    admin, admin_headers = make_user()
    community_id = make_community(owner_headers)
    invite(client, owner_headers, community_id, admin.id, role="ADMIN")

    assert client.delete(f"{API}/{community_id}", headers=admin_headers).status_code == 403
    assert client.delete(f"{API}/{community_id}", headers=owner_headers).status_code == 200
    assert client.get(f"{API}/{community_id}", headers=owner_headers).status_code == 404
    assert db_session.query(models.CommunityMember).count() == 0


# --- joining and leaving ---

def test_join_twice_conflicts(client, make_user, make_community):
    _, owner_headers = make_user()
    _, headers = make_user()
    community_id = make_community(owner_headers)
    assert join(client, headers, community_id).status_code == 201
    r = join(client, headers, community_id)
    assert r.status_code == 409
    assert r.json()["message"] == "User is already a member of this community"


def test_leave_then_join_reactivates_same_row(client, make_user, make_community):
    _, owner_headers = make_user()
    _, headers = make_user()
    community_id = make_community(owner_headers)
    first = join(client, headers, community_id).json()["data"]

    assert client.post(f"{API}/{community_id}/leave", headers=headers).status_code == 200
    again = join(client, headers, community_id)
    assert again.status_code == 201, again.text
    assert again.json()["data"]["id"] == first["id"]
    assert again.json()["data"]["role"] == "MEMBER"
    assert again.json()["data"]["isActive"] is True


def test_join_missing_community_is_404(client, make_user):
    _, headers = make_user()
    assert join(client, headers, 12345).status_code == 404


def test_owner_cannot_leave(client, make_user, make_community):
    _, owner_headers = make_user()
    community_id = make_community(owner_headers)
    r = client.post(f"{API}/{community_id}/leave", headers=owner_headers)
    assert r.status_code == 403


def test_non_member_cannot_leave(client, make_user, make_community):
    _, owner_headers = make_user()
    _, headers = make_user()
    community_id = make_community(owner_headers)
    assert client.post(f"{API}/{community_id}/leave", headers=headers).status_code == 404


def test_member_cap_scenario_and_fee_default(client, make_user, make_community, ladder_body):
    # owner A (cap 2) invites B; C can no longer join
    _, a_headers = make_user()
    b, b_headers = make_user()
    _, c_headers = make_user()
    community_id = make_community(a_headers, maxMembers=2)

    r = invite(client, a_headers, community_id, b.id)
    assert r.status_code == 201, r.text
    assert join(client, b_headers, community_id).status_code == 409  # already active through the invite

    r = join(client, c_headers, community_id)
    assert r.status_code == 409
    assert r.json()["message"] == "Community has reached maximum member limit"

    body = ladder_body(
        type="COMMUNITY",
        communityId=community_id,
        ladderType="ON_SITE",
        workContents="Balcony window",
        workSchedule="afternoon",
        ladderWorkDuration="3h",
        ladderWorkHours=3,
    )
    r = client.post("/api/v1/job-posts", json=body, headers=a_headers)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["communityWorkFee"] == 5


def test_cap_also_applies_on_rejoin(client, make_user, make_community):
    _, a_headers = make_user()
    _, b_headers = make_user()
    _, c_headers = make_user()
    community_id = make_community(a_headers, maxMembers=2)
    join(client, b_headers, community_id)
    client.post(f"{API}/{community_id}/leave", headers=b_headers)
    assert join(client, c_headers, community_id).status_code == 201
    assert join(client, b_headers, community_id).status_code == 409


# --- invitations ---

def test_invite_requires_inviter_role(client, make_user, make_community):
    _, owner_headers = make_user()
    member, member_headers = make_user()
    target, _ = make_user()
    community_id = make_community(owner_headers)
    join(client, member_headers, community_id)

    assert invite(client, member_headers, community_id, target.id).status_code == 403

    set_role(client, owner_headers, community_id, member.id, "MODERATOR")
    r = invite(client, member_headers, community_id, target.id)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["invitedBy"] == member.id
    assert r.json()["data"]["inviter"]["id"] == member.id


def test_invite_rules(client, make_user, make_community):
    _, owner_headers = make_user()
    moderator, moderator_headers = make_user()
    target, _ = make_user()
    community_id = make_community(owner_headers)
    invite(client, owner_headers, community_id, moderator.id, role="MODERATOR")

    assert invite(client, owner_headers, community_id, target.id, role="OWNER").status_code == 400
    assert invite(client, moderator_headers, community_id, target.id, role="ADMIN").status_code == 403
    assert invite(client, owner_headers, community_id, 9999).status_code == 404
    assert invite(client, owner_headers, community_id, moderator.id).status_code == 409


# --- members and roles ---

def test_members_ordered_by_role_rank(client, make_user, make_community):
    owner, owner_headers = make_user()
    admin, _ = make_user()
    moderator, _ = make_user()
    member, _ = make_user()
    community_id = make_community(owner_headers)
    invite(client, owner_headers, community_id, member.id)
    invite(client, owner_headers, community_id, moderator.id, role="MODERATOR")
    invite(client, owner_headers, community_id, admin.id, role="ADMIN")

    members = client.get(f"{API}/{community_id}/members", headers=owner_headers).json()["data"]
    assert [m["role"] for m in members] == ["OWNER", "ADMIN", "MODERATOR", "MEMBER"]
    assert [m["userId"] for m in members] == [owner.id, admin.id, moderator.id, member.id]


def test_members_hidden_from_outsiders(client, make_user, make_community):
    _, owner_headers = make_user()
    _, outsider_headers = make_user()
    community_id = make_community(owner_headers)
    assert client.get(f"{API}/{community_id}/members", headers=outsider_headers).status_code == 403


def test_role_change_rules(client, make_user, make_community):
    owner, owner_headers = make_user()
    admin, admin_headers = make_user()
    other_admin, _ = make_user()
    member, _ = make_user()
    community_id = make_community(owner_headers)
    invite(client, owner_headers, community_id, admin.id, role="ADMIN")
    invite(client, owner_headers, community_id, other_admin.id, role="ADMIN")
    invite(client, owner_headers, community_id, member.id)

    # owner is immutable and the owner role cannot be handed out
    assert set_role(client, admin_headers, community_id, owner.id, "MEMBER").status_code == 403
    assert set_role(client, owner_headers, community_id, member.id, "OWNER").status_code == 403
    # admins cannot touch other admins or mint new ones
    assert set_role(client, admin_headers, community_id, other_admin.id, "MEMBER").status_code == 403
    assert set_role(client, admin_headers, community_id, member.id, "ADMIN").status_code == 403
    # but may promote to moderator
    r = set_role(client, admin_headers, community_id, member.id, "MODERATOR")
    assert r.status_code == 200, r.text
    assert r.json()["data"]["role"] == "MODERATOR"
    # owner may demote an admin
    assert set_role(client, owner_headers, community_id, other_admin.id, "MEMBER").status_code == 200


def test_remove_member_is_soft(client, make_user, make_community, db_session):
    owner, owner_headers = make_user()
    admin, admin_headers = make_user()
    member, _ = make_user()
    community_id = make_community(owner_headers)
    invite(client, owner_headers, community_id, admin.id, role="ADMIN")
    invite(client, owner_headers, community_id, member.id)

    assert client.delete(f"{API}/{community_id}/members/{owner.id}", headers=admin_headers).status_code == 403
    assert client.delete(f"{API}/{community_id}/members/{member.id}", headers=admin_headers).status_code == 200
    assert client.delete(f"{API}/{community_id}/members/{member.id}", headers=admin_headers).status_code == 404

    row = (
        db_session.query(models.CommunityMember)
        .filter_by(user_id=member.id, community_id=community_id)
        .one()
    )
    assert row.is_active is False


# --- per-user views ---

def test_user_communities_and_reachable_users(client, make_user, make_community):
    me, headers = make_user(name="Cho")
    friend, friend_headers = make_user(name="Ahn")
    _, stranger_headers = make_user()
    first = make_community(headers, title="First")
    second = make_community(headers, title="Second")
    join(client, friend_headers, first)
    join(client, friend_headers, second)
    make_community(stranger_headers, title="Elsewhere")

    mine = client.get(f"{API}/user", headers=headers).json()["data"]
    assert sorted(c["id"] for c in mine) == sorted([first, second])
    assert all(c["role"] == "OWNER" for c in mine)

    reachable = client.get(f"{API}/users/all", headers=headers).json()["data"]
    # shared in two communities but listed once; the caller is excluded
    assert [m["userId"] for m in reachable] == [friend.id]
    assert reachable[0]["user"]["name"] == "Ahn"
