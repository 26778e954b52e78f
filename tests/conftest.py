"""
restcontroller — Test Configuration (conftest.py)
===================================================

What:  Shared fixtures: a sample "posts" controller, a token → identity
       resolver, and an HTTPX client bound to an app serving the controller.

Fixture Hierarchy:
    ├── find_identity:   async resolver accepting "valid-token" only
    ├── make_controller: factory building the posts controller for a config
    ├── make_client:     factory yielding an AsyncClient for a config
    └── client:          AsyncClient for the default config
"""

import os

# Set before restcontroller.config is imported anywhere
os.environ.setdefault("REST_LOG_LEVEL", "WARNING")

from contextlib import asynccontextmanager
from typing import Any, List, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request, Response
from httpx import ASGITransport, AsyncClient

from restcontroller import Pagination, set_pagination_headers
from restcontroller.config import RestControllerConfig
from restcontroller.controller import RestController
from restcontroller.filters.auth import get_identity
from restcontroller.main import register_exception_handlers
from restcontroller.middleware.logging import RequestLoggingMiddleware

USERS = {"valid-token": {"id": 1, "username": "alice"}}

POSTS = [{"id": i, "title": f"Post {i}"} for i in range(1, 46)]


async def find_identity(token: str) -> Optional[dict]:
    return USERS.get(token)


def build_posts_controller(config: Optional[RestControllerConfig] = None) -> RestController:
    """Sample controller with index / view / create / update / delete actions."""
    router = RestController(
        prefix="/api/posts",
        config=config,
        identity_resolver=find_identity,
    )
    calls: List[str] = []
    router.calls = calls

    def username(request: Request) -> Any:
        identity = get_identity(request)
        return identity["username"] if identity else None

    @router.get("")
    async def index(request: Request, response: Response, page: int = 1):
        calls.append("index")
        pagination = Pagination(total_count=len(POSTS), page=page, per_page=20)
        set_pagination_headers(response, pagination)
        return POSTS[pagination.offset:pagination.offset + pagination.limit]

    @router.get("/{post_id}")
    async def view(post_id: int, request: Request, response: Response):
        calls.append("view")
        if post_id > len(POSTS):
            return RestController.error(response, "not found", 404)
        return {"id": post_id, "viewer": username(request)}

    @router.post("", status_code=201)
    async def create(request: Request):
        calls.append("create")
        return {"created": True, "author": username(request)}

    @router.put("/{post_id}")
    async def update(post_id: int, request: Request):
        calls.append("update")
        return {"id": post_id, "editor": username(request)}

    @router.delete("/{post_id}")
    async def delete(post_id: int):
        calls.append("delete")
        raise HTTPException(status_code=404, detail="Post not found")

    return router


def build_app(controller: RestController) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(controller)
    return app


@pytest.fixture
def make_controller():
    return build_posts_controller


@pytest.fixture
def make_client():
    """
    Factory fixture: `async with make_client(config) as (client, controller):`
    """

    @asynccontextmanager
    async def _make(config: Optional[RestControllerConfig] = None):
        controller = build_posts_controller(config)
        transport = ASGITransport(app=build_app(controller))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client, controller

    return _make


@pytest_asyncio.fixture
async def client(make_client):
    async with make_client() as (test_client, controller):
        test_client.controller = controller
        yield test_client


@pytest.fixture
def identity_resolver():
    return find_identity
