"""
DevCamper Backend — Bootcamp Endpoint Tests
=============================================

What we test:
    ✅ Publisher creates a bootcamp (201, owner = caller, slug, location)
    ✅ One bootcamp per non-admin publisher; admins may publish more
    ✅ Role and authentication checks on write routes
    ✅ 404 names the missing id; malformed ids are a 400
    ✅ Only the owner or an admin may update / delete
    ✅ Listing: filters, select, sort, pagination
"""

import uuid

import pytest

from conftest import API, bootcamp_payload, create_bootcamp


class TestCreateBootcamp:

    @pytest.mark.asyncio
    async def test_publisher_creates_bootcamp(self, client, publisher):
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload(), headers=publisher.headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["user"] == str(publisher.id)
        assert "user_id" not in data
        assert data["slug"] == "devworks-bootcamp"
        assert data["photo"] == "no-photo.jpg"
        assert data["location"]["type"] == "Point"
        assert data["location"]["coordinates"] == [-71.103744, 42.350846]
        assert data["location"]["city"] == "Boston"

    @pytest.mark.asyncio
    async def test_second_bootcamp_rejected_for_publisher(self, client, publisher):
        await create_bootcamp(client, publisher)

        response = await client.post(
            f"{API}/bootcamps",
            json=bootcamp_payload(name="Another Camp"),
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": f"The user with ID {publisher.id} has already published a bootcamp",
        }

    @pytest.mark.asyncio
    async def test_admin_may_publish_several(self, client, admin):
        await create_bootcamp(client, admin)
        second = await create_bootcamp(client, admin, name="ModernTech Bootcamp")
        assert second["user"] == str(admin.id)

    @pytest.mark.asyncio
    async def test_regular_user_cannot_create(self, client, member):
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload(), headers=member.headers)

        assert response.status_code == 403
        assert response.json()["error"] == "User role user is not authorized to access this route"

    @pytest.mark.asyncio
    async def test_anonymous_cannot_create(self, client):
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload())

        assert response.status_code == 401
        assert response.json()["error"] == "Not authorized to access this route"

    @pytest.mark.asyncio
    async def test_invalid_career_rejected(self, client, publisher):
        response = await client.post(
            f"{API}/bootcamps",
            json=bootcamp_payload(careers=["Basket Weaving"]),
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert "careers" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_missing_fields_aggregated(self, client, publisher):
        payload = bootcamp_payload()
        del payload["name"]
        del payload["description"]

        response = await client.post(f"{API}/bootcamps", json=payload, headers=publisher.headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert "name" in error and "description" in error

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, client, publisher, other_publisher):
        await create_bootcamp(client, publisher)

        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload(), headers=other_publisher.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Duplicate field value entered"

    @pytest.mark.asyncio
    async def test_unknown_address_rejected(self, client, publisher):
        response = await client.post(
            f"{API}/bootcamps",
            json=bootcamp_payload(address="Nowhere 99999"),
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Could not geocode 'Nowhere 99999'"


class TestGetBootcamp:

    @pytest.mark.asyncio
    async def test_get_existing(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.get(f"{API}/bootcamps/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Devworks Bootcamp"

    @pytest.mark.asyncio
    async def test_missing_id_is_404_with_id(self, client):
        missing = uuid.uuid4()

        response = await client.get(f"{API}/bootcamps/{missing}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": f"Bootcamp not found with id of {missing}"}

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.get(f"{API}/bootcamps/not-an-id")

        assert response.status_code == 400
        assert response.json()["error"] == "Resource not found with id of not-an-id"


class TestUpdateDeleteBootcamp:

    @pytest.mark.asyncio
    async def test_owner_updates_and_slug_follows_name(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}",
            json={"name": "Devworks Academy", "housing": False},
            headers=publisher.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Devworks Academy"
        assert data["slug"] == "devworks-academy"
        assert data["housing"] is False

    @pytest.mark.asyncio
    async def test_address_change_regeocodes(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}",
            json={"address": "220 Pawtucket St, Lowell, MA 01854"},
            headers=publisher.headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["location"]["city"] == "Lowell"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["put", "delete"])
    async def test_non_owner_rejected(self, client, publisher, other_publisher, method):
        created = await create_bootcamp(client, publisher)
        url = f"{API}/bootcamps/{created['id']}"

        if method == "put":
            response = await client.put(url, json={"name": "Hijacked"}, headers=other_publisher.headers)
            action = "update"
        else:
            response = await client.delete(url, headers=other_publisher.headers)
            action = "delete"

        assert response.status_code == 403
        assert response.json()["error"] == (
            f"User {other_publisher.id} is not authorized to {action} this bootcamp"
        )
        unchanged = await client.get(url)
        assert unchanged.json()["data"]["name"] == "Devworks Bootcamp"

    @pytest.mark.asyncio
    async def test_non_owner_rejected_even_with_empty_payload(self, client, publisher, other_publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}", json={}, headers=other_publisher.headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_may_update_any(self, client, publisher, admin):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}", json={"job_guarantee": True}, headers=admin.headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["job_guarantee"] is True

    @pytest.mark.asyncio
    async def test_required_field_cannot_be_nulled(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}", json={"name": None}, headers=publisher.headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "name: must not be null"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["name", "description", "address"])
    async def test_blank_text_rejected_on_update(self, client, publisher, field):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}", json={field: "   "}, headers=publisher.headers
        )

        assert response.status_code == 400
        assert field in response.json()["error"]
        unchanged = (await client.get(f"{API}/bootcamps/{created['id']}")).json()["data"]
        assert unchanged["name"] == "Devworks Bootcamp"
        assert unchanged["slug"] == "devworks-bootcamp"

    @pytest.mark.asyncio
    async def test_name_trimmed_on_update(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.put(
            f"{API}/bootcamps/{created['id']}", json={"name": "  Devworks Academy  "}, headers=publisher.headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Devworks Academy"
        assert response.json()["data"]["slug"] == "devworks-academy"

    @pytest.mark.asyncio
    async def test_owner_deletes(self, client, publisher):
        created = await create_bootcamp(client, publisher)

        response = await client.delete(f"{API}/bootcamps/{created['id']}", headers=publisher.headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert (await client.get(f"{API}/bootcamps/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_owner_may_publish_again_after_delete(self, client, publisher):
        created = await create_bootcamp(client, publisher)
        await client.delete(f"{API}/bootcamps/{created['id']}", headers=publisher.headers)

        again = await create_bootcamp(client, publisher, name="Second Try Bootcamp")
        assert again["user"] == str(publisher.id)


class TestListBootcamps:

    async def _seed(self, client, publisher, other_publisher, admin):
        await create_bootcamp(client, publisher)
        await create_bootcamp(
            client,
            other_publisher,
            name="ModernTech Bootcamp",
            address="220 Pawtucket St, Lowell, MA 01854",
            careers=["Web Development", "Data Science"],
            housing=False,
        )
        await create_bootcamp(
            client,
            admin,
            name="Codemasters",
            address="45 Upper College Rd Kingston RI 02881",
            careers=["Mobile Development", "Business"],
            housing=False,
        )

    @pytest.mark.asyncio
    async def test_list_envelope(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        response = await client.get(f"{API}/bootcamps")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert body["pagination"] == {}
        assert all(item["courses"] == [] for item in body["data"])

    @pytest.mark.asyncio
    async def test_filter_boolean_and_location_alias(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        housing = (await client.get(f"{API}/bootcamps", params={"housing": "true"})).json()
        in_ma = (await client.get(f"{API}/bootcamps", params={"location.state": "MA"})).json()

        assert [b["name"] for b in housing["data"]] == ["Devworks Bootcamp"]
        assert sorted(b["name"] for b in in_ma["data"]) == ["Devworks Bootcamp", "ModernTech Bootcamp"]

    @pytest.mark.asyncio
    async def test_filter_careers_in(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        response = await client.get(f"{API}/bootcamps", params={"careers[in]": "Data Science,Mobile Development"})

        names = sorted(b["name"] for b in response.json()["data"])
        assert names == ["Codemasters", "ModernTech Bootcamp"]

    @pytest.mark.asyncio
    async def test_filter_and_select_by_owner(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        response = await client.get(
            f"{API}/bootcamps", params={"user": str(other_publisher.id), "select": "name,user"}
        )

        data = response.json()["data"]
        assert data == [{"id": data[0]["id"], "name": "ModernTech Bootcamp", "user": str(other_publisher.id)}]

    @pytest.mark.asyncio
    async def test_select_and_sort(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        response = await client.get(f"{API}/bootcamps", params={"select": "name,housing", "sort": "name"})

        data = response.json()["data"]
        assert [b["name"] for b in data] == ["Codemasters", "Devworks Bootcamp", "ModernTech Bootcamp"]
        assert set(data[0]) == {"id", "name", "housing"}

    @pytest.mark.asyncio
    async def test_pagination_links(self, client, publisher, other_publisher, admin):
        await self._seed(client, publisher, other_publisher, admin)

        first = (await client.get(f"{API}/bootcamps", params={"limit": 2})).json()
        second = (await client.get(f"{API}/bootcamps", params={"limit": 2, "page": 2})).json()

        assert first["count"] == 2
        assert first["pagination"] == {"next": {"page": 2, "limit": 2}}
        assert second["count"] == 1
        assert second["pagination"] == {"prev": {"page": 1, "limit": 2}}

    @pytest.mark.asyncio
    async def test_uncoercible_filter_value(self, client):
        response = await client.get(f"{API}/bootcamps", params={"average_cost[lte]": "cheap"})

        assert response.status_code == 400
        assert response.json()["success"] is False
