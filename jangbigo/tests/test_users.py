from jangbigo import models

API = "/api/v1/users"


def test_admin_lists_with_pagination(client, make_user):
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    for _ in range(4):
        make_user()

    r = client.get(API, params={"page": 2, "limit": 2}, headers=admin_headers)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert len(data["users"]) == 2
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}


def test_list_filters_by_role(client, make_user):
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    make_user()
    r = client.get(API, params={"role": "ADMIN"}, headers=admin_headers)
    assert [u["role"] for u in r.json()["data"]["users"]] == ["ADMIN"]


def test_limit_is_capped(client, make_user):
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    assert client.get(API, params={"limit": 101}, headers=admin_headers).status_code == 400


def test_users_read_themselves_but_not_others(client, make_user):
    me, headers = make_user()
    other, _ = make_user()
    r = client.get(f"{API}/{me.id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["kakaoId"] == str(me.kakao_id)
    assert client.get(f"{API}/{other.id}", headers=headers).status_code == 403


def test_self_update_cannot_change_role(client, make_user):
    me, headers = make_user()
    r = client.put(f"{API}/{me.id}", json={"nickname": "boom-lee"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["nickname"] == "boom-lee"

    r = client.put(f"{API}/{me.id}", json={"role": "ADMIN"}, headers=headers)
    assert r.status_code == 403


def test_update_email_must_be_unique(client, make_user):
    me, headers = make_user()
    other, _ = make_user()
    r = client.put(f"{API}/{me.id}", json={"email": other.email}, headers=headers)
    assert r.status_code == 409
    assert r.json()["data"]["errors"][0]["field"] == "email"


def test_admin_creates_promotes_and_deletes(client, make_user):
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    r = client.post(API, json={"name": "Park", "email": "park@example.com"}, headers=admin_headers)
    assert r.status_code == 201, r.text
    user_id = r.json()["data"]["id"]
    assert r.json()["data"]["kakaoId"] is None

    r = client.put(f"{API}/{user_id}", json={"role": "ADMIN"}, headers=admin_headers)
    assert r.json()["data"]["role"] == "ADMIN"

    assert client.delete(f"{API}/{user_id}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/{user_id}", headers=admin_headers).status_code == 404
    assert client.delete(f"{API}/{user_id}", headers=admin_headers).status_code == 404


def test_invalid_email_is_rejected(client, make_user):
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    r = client.post(API, json={"email": "not-an-email"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["data"]["errors"][0]["field"] == "email"


def test_deleting_user_removes_their_posts(client, make_user, sky_body, db_session):
    author, headers = make_user()
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    assert client.post("/api/v1/job-posts", json=sky_body(), headers=headers).status_code == 201
    assert client.delete(f"{API}/{author.id}", headers=admin_headers).status_code == 200
    db_session.expire_all()
    assert db_session.query(models.JobPost).count() == 0
