"""
restcontroller — Bearer Authentication Tests
==============================================

What:  Optional vs mandatory auth per action, token extraction, challenge
       header, and identity propagation to actions.

Test Strategy:
    ✅ Default config: every action optional, valid token recognised
    ✅ only_auth_routes forces auth on the listed actions only
    ✅ Invalid / malformed tokens: guest on optional, 401 on mandatory
    ✅ Sync and async identity resolvers
"""

import pytest
from starlette.requests import Request

from restcontroller.config import RestControllerConfig
from restcontroller.exceptions import UnauthorizedError
from restcontroller.filters.auth import HttpBearerAuth

VALID = {"Authorization": "Bearer valid-token"}
INVALID = {"Authorization": "Bearer stolen-token"}


def make_request(headers=None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw, "query_string": b""})


class TestDefaultOptionalAuth:
    @pytest.mark.asyncio
    async def test_guest_allowed(self, client):
        response = await client.get("/api/posts/1")
        assert response.status_code == 200
        assert response.json() == {"id": 1, "viewer": None}

    @pytest.mark.asyncio
    async def test_valid_token_sets_identity(self, client):
        response = await client.get("/api/posts/1", headers=VALID)
        assert response.json()["viewer"] == "alice"

    @pytest.mark.asyncio
    async def test_invalid_token_continues_as_guest(self, client):
        response = await client.get("/api/posts/1", headers=INVALID)
        assert response.status_code == 200
        assert response.json()["viewer"] is None


class TestMandatoryAuth:
    CONFIG = RestControllerConfig(only_auth_routes=["create", "update"])

    @pytest.mark.asyncio
    async def test_missing_token_rejected(self, make_client):
        async with make_client(self.CONFIG) as (client, controller):
            response = await client.post("/api/posts")

            assert response.status_code == 401
            assert response.headers["www-authenticate"] == 'Bearer realm="api"'
            body = response.json()
            assert body["error"] == "unauthorized"
            assert body["message"] == "Your request was made with invalid credentials."
            assert controller.calls == []

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, make_client):
        async with make_client(self.CONFIG) as (client, controller):
            response = await client.put("/api/posts/1", headers=INVALID)
            assert response.status_code == 401
            assert controller.calls == []

    @pytest.mark.asyncio
    async def test_other_scheme_rejected(self, make_client):
        async with make_client(self.CONFIG) as (client, _):
            response = await client.post("/api/posts", headers={"Authorization": "Basic YWxpY2U6c2VjcmV0"})
            assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_accepted(self, make_client):
        async with make_client(self.CONFIG) as (client, controller):
            response = await client.post("/api/posts", headers=VALID)
            assert response.status_code == 201
            assert response.json() == {"created": True, "author": "alice"}
            assert controller.calls == ["create"]

    @pytest.mark.asyncio
    async def test_unlisted_actions_stay_optional(self, make_client):
        async with make_client(self.CONFIG) as (client, _):
            response = await client.get("/api/posts")
            assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unauthorized_response_keeps_cors_headers(self, make_client):
        async with make_client(self.CONFIG) as (client, _):
            response = await client.post("/api/posts", headers={"Origin": "https://example.com"})
            assert response.status_code == 401
            assert response.headers["access-control-allow-origin"] == "https://example.com"

    @pytest.mark.asyncio
    async def test_no_optional_routes_makes_everything_mandatory(self, make_client):
        config = RestControllerConfig(optional_auth_routes=[])
        async with make_client(config) as (client, _):
            assert (await client.get("/api/posts")).status_code == 401
            assert (await client.get("/api/posts", headers=VALID)).status_code == 200


class TestClassification:
    def test_only_beats_optional(self):
        auth = HttpBearerAuth(optional=["*"], only=["create"], except_=["options"])
        assert auth.is_optional("create") is False
        assert auth.is_optional("index") is True

    def test_unlisted_action_inactive_when_only_set(self):
        auth = HttpBearerAuth(optional=["index"], only=["create"], except_=["options"])
        assert auth.is_active("create") is True
        assert auth.is_active("index") is True
        assert auth.is_active("view") is False

    def test_wildcard_patterns(self):
        auth = HttpBearerAuth(optional=[], only=["admin_*"])
        assert auth.is_active("admin_delete") is True
        assert auth.is_optional("admin_delete") is False
        assert auth.is_active("index") is False

    def test_except_wins(self):
        auth = HttpBearerAuth(only=["*"], except_=["options"])
        assert auth.is_active("options") is False


class TestTokenResolution:
    @pytest.mark.asyncio
    async def test_extract_token(self):
        auth = HttpBearerAuth()
        assert await auth.extract_token(make_request({"Authorization": "Bearer abc.def"})) == "abc.def"
        assert await auth.extract_token(make_request({"Authorization": "bearer abc.def"})) == "abc.def"
        assert await auth.extract_token(make_request({"Authorization": "Basic abc"})) is None
        assert await auth.extract_token(make_request({"Authorization": "Bearer"})) is None
        assert await auth.extract_token(make_request()) is None

    @pytest.mark.asyncio
    async def test_sync_resolver(self):
        auth = HttpBearerAuth(identity_resolver=lambda token: {"token": token})
        identity = await auth.authenticate(make_request({"Authorization": "Bearer t1"}))
        assert identity == {"token": "t1"}

    @pytest.mark.asyncio
    async def test_resolver_returning_none_raises(self):
        auth = HttpBearerAuth(identity_resolver=lambda token: None, realm="admin")
        with pytest.raises(UnauthorizedError) as excinfo:
            await auth.authenticate(make_request({"Authorization": "Bearer t1"}))
        assert excinfo.value.headers["WWW-Authenticate"] == 'Bearer realm="admin"'

    @pytest.mark.asyncio
    async def test_missing_resolver_rejects_token(self):
        auth = HttpBearerAuth()
        with pytest.raises(UnauthorizedError):
            await auth.authenticate(make_request({"Authorization": "Bearer t1"}))

    @pytest.mark.asyncio
    async def test_no_token_returns_none(self):
        auth = HttpBearerAuth(identity_resolver=lambda token: {"token": token})
        assert await auth.authenticate(make_request()) is None
