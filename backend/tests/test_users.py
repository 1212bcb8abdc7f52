"""Admin user management endpoint tests."""

import uuid

import pytest

from conftest import API


class TestUsersAdmin:

    @pytest.mark.asyncio
    async def test_non_admin_rejected(self, client, publisher):
        response = await client.get(f"{API}/users", headers=publisher.headers)

        assert response.status_code == 403
        assert response.json()["error"] == "User role publisher is not authorized to access this route"

    @pytest.mark.asyncio
    async def test_list_users(self, client, admin, member):
        response = await client.get(f"{API}/users", params={"sort": "name"}, headers=admin.headers)

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 2
        assert [u["name"] for u in body["data"]] == ["Admin", "Regular User"]

    @pytest.mark.asyncio
    async def test_private_columns_not_filterable(self, client, admin, member):
        response = await client.get(f"{API}/users", params={"password_hash[gt]": "a"}, headers=admin.headers)

        assert response.json()["count"] == 2

    @pytest.mark.asyncio
    async def test_crud(self, client, admin):
        created = await client.post(
            f"{API}/users",
            json={"name": "Staff", "email": "Staff@Gmail.com", "password": "secret1", "role": "admin"},
            headers=admin.headers,
        )
        assert created.status_code == 201
        user = created.json()["data"]
        assert user["email"] == "staff@gmail.com"
        assert user["role"] == "admin"

        fetched = await client.get(f"{API}/users/{user['id']}", headers=admin.headers)
        assert fetched.json()["data"]["name"] == "Staff"

        updated = await client.put(f"{API}/users/{user['id']}", json={"role": "publisher"}, headers=admin.headers)
        assert updated.json()["data"]["role"] == "publisher"

        deleted = await client.delete(f"{API}/users/{user['id']}", headers=admin.headers)
        assert deleted.json() == {"success": True, "data": {}}

        gone = await client.get(f"{API}/users/{user['id']}", headers=admin.headers)
        assert gone.status_code == 404
        assert gone.json()["error"] == f"No user with id of {user['id']}"

    @pytest.mark.asyncio
    async def test_missing_user(self, client, admin):
        missing = uuid.uuid4()

        response = await client.get(f"{API}/users/{missing}", headers=admin.headers)

        assert response.status_code == 404
