"""
restcontroller — CSRF Validation Tests
========================================

CSRF checks are off by default and enforced only for controllers that set
enable_csrf_validation.
"""

import pytest

from restcontroller.config import RestControllerConfig

CSRF_CONFIG = RestControllerConfig(enable_csrf_validation=True)


class TestCsrfValidation:
    @pytest.mark.asyncio
    async def test_disabled_by_default(self, client):
        response = await client.post("/api/posts")
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_unsafe_request_without_token_rejected(self, make_client):
        async with make_client(CSRF_CONFIG) as (client, controller):
            response = await client.post("/api/posts")
            assert response.status_code == 400
            assert response.json()["error"] == "csrf_validation_failed"
            assert controller.calls == []

    @pytest.mark.asyncio
    async def test_mismatched_token_rejected(self, make_client):
        async with make_client(CSRF_CONFIG) as (client, _):
            response = await client.post(
                "/api/posts",
                headers={"Cookie": "_csrf=expected", "X-CSRF-Token": "forged"},
            )
            assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_matching_token_accepted(self, make_client):
        async with make_client(CSRF_CONFIG) as (client, _):
            response = await client.post(
                "/api/posts",
                headers={"Cookie": "_csrf=abc123", "X-CSRF-Token": "abc123"},
            )
            assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_safe_methods_pass(self, make_client):
        async with make_client(CSRF_CONFIG) as (client, _):
            assert (await client.get("/api/posts")).status_code == 200
            assert (await client.options("/api/posts")).status_code == 200
