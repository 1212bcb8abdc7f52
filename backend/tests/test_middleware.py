"""
DevCamper Backend — Middleware Tests
======================================

What we test:
    ✅ Request id generated / echoed
    ✅ Security headers on every response
    ✅ Rate limiting: 429 envelope with Retry-After, /health exempt
    ✅ Sanitizing: `$` keys dropped, markup escaped, last duplicate param wins
"""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import API, bootcamp_payload
from devcamper.context import AppContext
from devcamper.main import create_app
from devcamper.middleware.sanitize import clean_query_string, clean_value


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get(f"{API}/bootcamps")

        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_client_value_echoed(self, client):
        response = await client.get(f"{API}/bootcamps", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestSecurityHeaders:

    @pytest.mark.asyncio
    async def test_headers_present(self, client):
        response = await client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        # HSTS only in production
        assert "Strict-Transport-Security" not in response.headers

    @pytest.mark.asyncio
    async def test_headers_on_error_responses(self, client):
        response = await client.get(f"{API}/no-such-route")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_limit_exceeded(self, settings, geocoder):
        limited = settings.model_copy(update={"rate_limit_requests": 2})
        context = AppContext.build(limited, geocoder=geocoder)
        transport = ASGITransport(app=create_app(context=context), raise_app_exceptions=False)

        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                statuses = [(await client.get(f"{API}/nothing")).status_code for _ in range(2)]
                blocked = await client.get(f"{API}/nothing")
                health = await client.get("/health")
        finally:
            await context.close()

        assert statuses == [404, 404]
        assert blocked.status_code == 429
        assert blocked.json() == {"success": False, "error": "Too many requests, please try again later."}
        assert int(blocked.headers["Retry-After"]) > 0
        assert health.status_code != 429


class TestSanitizeHelpers:

    def test_dollar_keys_dropped_at_any_depth(self):
        cleaned = clean_value({"name": "x", "$gt": 1, "nested": {"$where": "1", "ok": [{"$ne": 2, "v": 3}]}})

        assert cleaned == {"name": "x", "nested": {"ok": [{"v": 3}]}}

    def test_markup_escaped(self):
        assert clean_value({"d": "<b>hi</b>"}) == {"d": "&lt;b&gt;hi&lt;/b&gt;"}

    def test_non_strings_untouched(self):
        assert clean_value({"n": 5, "b": True, "none": None}) == {"n": 5, "b": True, "none": None}

    def test_query_string_last_value_wins(self):
        assert clean_query_string(b"sort=name&housing=true&housing=false") == b"sort=name&housing=false"

    def test_query_string_dollar_keys_dropped(self):
        assert clean_query_string(b"%24where=1&limit=2") == b"limit=2"


class TestSanitizeEndToEnd:

    @pytest.mark.asyncio
    async def test_script_tags_escaped_in_stored_data(self, client, publisher):
        payload = bootcamp_payload(description="<script>alert(1)</script> Learn to code")
        payload["$where"] = "sleep(1000)"

        response = await client.post(f"{API}/bootcamps", json=payload, headers=publisher.headers)

        assert response.status_code == 201
        assert response.json()["data"]["description"] == "&lt;script&gt;alert(1)&lt;/script&gt; Learn to code"

    @pytest.mark.asyncio
    async def test_duplicate_query_param_collapsed(self, client):
        # The first page value alone would be a 400
        response = await client.get(f"{API}/bootcamps?page=abc&page=1")

        assert response.status_code == 200
