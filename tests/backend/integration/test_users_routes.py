import pytest


pytestmark = pytest.mark.asyncio


async def test_user_updates_own_profile(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    resp = await client.patch(
        f"/api/users/{user.id}",
        headers=headers,
        json={"name": "Jane Doe", "email": "jane@example.com"},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Jane Doe"
    assert resp.json()["user"]["email"] == "jane@example.com"


async def test_user_cannot_edit_someone_else(client, create_user, auth_header_factory):
    user, password = await create_user()
    other, _ = await create_user()
    headers = await auth_header_factory(user.username, password)

    resp = await client.patch(f"/api/users/{other.id}", headers=headers, json={"name": "x"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "FORBIDDEN_NOT_OWNER"


async def test_duplicate_username_rejected(client, create_user, auth_header_factory):
    user, password = await create_user()
    other, _ = await create_user()
    headers = await auth_header_factory(user.username, password)

    resp = await client.patch(f"/api/users/{user.id}", headers=headers, json={"username": other.username})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "USERNAME_EXISTS"


async def test_change_own_password(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    wrong = await client.patch(
        f"/api/users/{user.id}/change-password",
        headers=headers,
        json={"current_password": "nope", "new_password": "Brand#New1"},
    )
    assert wrong.status_code == 400
    assert wrong.json()["detail"]["code"] == "CURRENT_PASSWORD_INVALID"

    ok = await client.patch(
        f"/api/users/{user.id}/change-password",
        headers=headers,
        json={"current_password": password, "new_password": "Brand#New1"},
    )
    assert ok.status_code == 200

    relogin = await client.post("/api/login", json={"username": user.username, "password": "Brand#New1"})
    assert relogin.status_code == 200


async def test_admin_changes_password_without_current(client, create_admin, create_user, auth_header_factory):
    admin, admin_password = await create_admin()
    user, _ = await create_user()
    headers = await auth_header_factory(admin.username, admin_password)

    resp = await client.patch(
        f"/api/users/{user.id}/change-password",
        headers=headers,
        json={"new_password": "Reset#Pass1"},
    )
    assert resp.status_code == 200
    relogin = await client.post("/api/login", json={"username": user.username, "password": "Reset#Pass1"})
    assert relogin.status_code == 200
