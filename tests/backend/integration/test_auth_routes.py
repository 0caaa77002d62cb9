import pytest


pytestmark = pytest.mark.asyncio


async def login_user(client, username: str, password: str):
    return await client.post(
        "/api/login",
        json={"username": username, "password": password},
    )


async def test_health_endpoints(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert (await client.get("/healthz")).json() == {"ok": True}


async def test_login_returns_user_and_api_token(client, create_user):
    user, password = await create_user()

    resp = await login_user(client, user.username, password)
    body = resp.json()
    assert resp.status_code == 200
    assert body["user"]["username"] == user.username
    assert body["user"]["id"] == user.id
    assert "password_hash" not in body["user"]
    assert body["api_token"]
    assert "api_token" in resp.cookies


async def test_login_rejects_bad_credentials(client, create_user):
    user, _ = await create_user()

    bad_password = await login_user(client, user.username, "wrong")
    assert bad_password.status_code == 401
    assert bad_password.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"

    unknown = await login_user(client, "nobody", "whatever")
    assert unknown.status_code == 401


async def test_me_and_logout(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    me = await client.get("/api/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["user"]["username"] == user.username

    logout = await client.post("/api/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["success"] is True


async def test_protected_routes_require_token(client):
    assert (await client.post("/api/logout")).status_code == 401
    resp = await client.get("/api/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "AUTH_INVALID_TOKEN"
