"""
DevCamper Backend — Auth Endpoint Tests
=========================================

What we test:
    ✅ Register / login issue a JWT in the body and the `token` cookie
    ✅ Login failure messages
    ✅ Bearer header or cookie authenticates /auth/me
    ✅ Profile and password updates
    ✅ Forgot / reset password flow, including mail failure
"""

import re

import pytest
from sqlalchemy import select

from conftest import API, TEST_PASSWORD
from devcamper.exceptions import MailDeliveryError
from devcamper.models.user import User
from devcamper.result import Err, Ok


class RecordingMailer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, to, subject, body):
        self.sent.append((to, subject, body))
        if self.fail:
            return Err(MailDeliveryError(context={"to": to}))
        return Ok(None)


def registration(**overrides):
    payload = {"name": "John Doe", "email": "John@Gmail.com", "password": "secret1", "role": "publisher"}
    payload.update(overrides)
    return payload


class TestRegisterLogin:

    @pytest.mark.asyncio
    async def test_register_returns_token_and_cookie(self, client):
        response = await client.post(f"{API}/auth/register", json=registration())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["token"]
        assert response.cookies.get("token") == body["token"]
        assert "httponly" in response.headers["set-cookie"].lower()

    @pytest.mark.asyncio
    async def test_registered_user_can_use_token(self, client):
        token = (await client.post(f"{API}/auth/register", json=registration())).json()["token"]

        response = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

        data = response.json()["data"]
        assert data["email"] == "john@gmail.com"
        assert data["role"] == "publisher"
        assert "password" not in data and "password_hash" not in data

    @pytest.mark.asyncio
    async def test_register_cannot_self_assign_admin(self, client):
        response = await client.post(f"{API}/auth/register", json=registration(role="admin"))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_short_password(self, client):
        response = await client.post(f"{API}/auth/register", json=registration(password="123"))

        assert response.status_code == 400
        assert "password" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client):
        await client.post(f"{API}/auth/register", json=registration())

        response = await client.post(f"{API}/auth/register", json=registration(email="john@gmail.com"))

        assert response.status_code == 400
        assert response.json()["error"] == "Duplicate field value entered"

    @pytest.mark.asyncio
    async def test_login(self, client, publisher):
        response = await client.post(
            f"{API}/auth/login", json={"email": publisher.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["token"]

    @pytest.mark.asyncio
    async def test_login_missing_password(self, client, publisher):
        response = await client.post(f"{API}/auth/login", json={"email": publisher.email})

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide an email and password"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("publisher@gmail.com", "wrong-password"), ("nobody@gmail.com", TEST_PASSWORD)],
    )
    async def test_login_invalid_credentials(self, client, publisher, email, password):
        response = await client.post(f"{API}/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_me_with_cookie(self, client, member):
        response = await client.get(f"{API}/auth/me", headers={"Cookie": f"token={member.token}"})

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(member.id)

    @pytest.mark.asyncio
    async def test_me_without_token(self, client):
        response = await client.get(f"{API}/auth/me")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authorized to access this route"}

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client):
        response = await client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client, member):
        response = await client.get(f"{API}/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert "token=" in response.headers["set-cookie"]

    @pytest.mark.asyncio
    async def test_update_details(self, client, member):
        response = await client.put(
            f"{API}/auth/updatedetails",
            json={"name": "Renamed", "email": "Renamed@Gmail.com"},
            headers=member.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["email"] == "renamed@gmail.com"

    @pytest.mark.asyncio
    async def test_update_password(self, client, member):
        wrong = await client.put(
            f"{API}/auth/updatepassword",
            json={"current_password": "nope-nope", "new_password": "newsecret"},
            headers=member.headers,
        )
        right = await client.put(
            f"{API}/auth/updatepassword",
            json={"current_password": TEST_PASSWORD, "new_password": "newsecret"},
            headers=member.headers,
        )
        login = await client.post(f"{API}/auth/login", json={"email": member.email, "password": "newsecret"})

        assert wrong.status_code == 401
        assert wrong.json()["error"] == "Password is incorrect"
        assert right.status_code == 200
        assert right.json()["token"]
        assert login.status_code == 200


class TestPasswordReset:

    @pytest.mark.asyncio
    async def test_forgot_unknown_email(self, client):
        response = await client.post(f"{API}/auth/forgotpassword", json={"email": "ghost@gmail.com"})

        assert response.status_code == 404
        assert response.json()["error"] == "There is no user with that email"

    @pytest.mark.asyncio
    async def test_reset_flow(self, client, context, member):
        mailer = RecordingMailer()
        context.auth.mailer = mailer

        forgot = await client.post(f"{API}/auth/forgotpassword", json={"email": member.email})

        assert forgot.status_code == 200
        assert forgot.json() == {"success": True, "data": "Email sent"}
        to, _, body = mailer.sent[0]
        assert to == member.email
        raw_token = re.search(r"/api/v1/auth/resetpassword/([0-9a-f]+)", body).group(1)

        reset = await client.put(f"{API}/auth/resetpassword/{raw_token}", json={"password": "brandnew"})
        assert reset.status_code == 200
        assert reset.json()["token"]

        login = await client.post(f"{API}/auth/login", json={"email": member.email, "password": "brandnew"})
        assert login.status_code == 200

        reused = await client.put(f"{API}/auth/resetpassword/{raw_token}", json={"password": "another1"})
        assert reused.status_code == 400
        assert reused.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_unknown_reset_token(self, client):
        response = await client.put(f"{API}/auth/resetpassword/deadbeef", json={"password": "brandnew"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_mail_failure_clears_token(self, client, context, member):
        context.auth.mailer = RecordingMailer(fail=True)

        response = await client.post(f"{API}/auth/forgotpassword", json={"email": member.email})

        assert response.status_code == 500
        assert response.json()["error"] == "Email could not be sent"
        async with context.session_factory() as session:
            user = (await session.execute(select(User).where(User.id == member.id))).scalar_one()
        assert user.reset_password_token is None
        assert user.reset_password_expire is None
