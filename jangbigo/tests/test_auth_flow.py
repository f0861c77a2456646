import pytest
import jwt

from jangbigo import models


def kakao_id_token(sub="3141592653", email="driver@example.com", nickname="crane-kim", **extra):
    # signature is not checked unless KAKAO_VERIFY_ID_TOKEN is on
    claims = {"iss": "https://kauth.kakao.com", "sub": sub, "email": email, "nickname": nickname, **extra}
    return jwt.encode(claims, "kakao-signing-key-used-only-in-tests", algorithm="HS256")


def kakao_login(client, token):
    return client.post("/api/v1/auth/kakao-login", json={"idToken": token})


def test_first_login_creates_user_then_me(client):
    r = kakao_login(client, kakao_id_token())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == 201
    user = body["data"]["user"]
    assert user["kakaoId"] == "3141592653"
    assert user["email"] == "driver@example.com"
    assert user["nickname"] == "crane-kim"
    assert user["role"] == "USER"
    token = body["data"]["token"]

    r2 = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r2.status_code == 200, r2.text
    assert r2.json()["data"]["id"] == user["id"]


def test_second_login_returns_existing_user(client):
    first = kakao_login(client, kakao_id_token()).json()["data"]["user"]
    r = kakao_login(client, kakao_id_token(nickname="renamed"))
    assert r.status_code == 200, r.text
    again = r.json()["data"]["user"]
    assert again["id"] == first["id"]
    assert again["nickname"] == "crane-kim"


def test_new_kakao_account_with_taken_email_conflicts(client):
    assert kakao_login(client, kakao_id_token()).status_code == 201
    r = kakao_login(client, kakao_id_token(sub="2718281828"))
    assert r.status_code == 409
    assert r.json()["data"]["errors"][0]["field"] == "email"


def test_garbage_id_token_is_rejected(client):
    r = kakao_login(client, "not-a-jwt")
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid token"


@pytest.mark.parametrize("sub", ["9" * 30, str(2**63), "", "abc"])
def test_id_token_subject_must_fit_kakao_id(client, db_session, sub):
    r = kakao_login(client, kakao_id_token(sub=sub))
    assert r.status_code == 400
    assert r.json()["data"]["errors"] == [{"field": "idToken", "message": "Invalid token"}]
    assert db_session.query(models.User).count() == 0


def test_largest_kakao_id_is_accepted(client):
    r = kakao_login(client, kakao_id_token(sub=str(2**63 - 1)))
    assert r.status_code == 201, r.text
    assert r.json()["data"]["user"]["kakaoId"] == str(2**63 - 1)


def test_missing_id_token_is_validation_error(client):
    r = client.post("/api/v1/auth/kakao-login", json={})
    assert r.status_code == 400
    assert r.json()["data"]["errors"][0]["field"] == "idToken"


def test_me_requires_token(client):
    r = client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Access token required"


def test_token_is_only_read_from_authorization_header(client, make_user):
    _, headers = make_user()
    client.cookies.set("access_token", headers["Authorization"])
    try:
        r = client.get("/api/v1/auth/me")
    finally:
        client.cookies.clear()
    assert r.status_code == 401


def test_me_rejects_tampered_token(client):
    r = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer abc.def.ghi"})
    assert r.status_code == 401


def test_token_for_deleted_user_is_rejected(client, make_user, db_session):
    user, headers = make_user()
    db_session.delete(user)
    db_session.commit()
    r = client.get("/api/v1/auth/me", headers=headers)
    assert r.status_code == 401


def test_admin_routes_need_admin_role(client, make_user):
    _, user_headers = make_user()
    _, admin_headers = make_user(role=models.UserRole.ADMIN)
    assert client.get("/api/v1/users", headers=user_headers).status_code == 403
    assert client.get("/api/v1/users", headers=admin_headers).status_code == 200
