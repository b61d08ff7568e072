"""Shared fixtures: a fake monitor API served through httpx.MockTransport."""

from datetime import datetime

import httpx
import pytest

from api import MODEL_USAGE_PATH, QUOTA_LIMIT_PATH, TOOL_USAGE_PATH, build_api_config
from cache import SnapshotCache

NOW = datetime(2026, 10, 19, 12, 0, 0)


class FakeMonitorApi:
    """Serves canned responses by URL path and records every request.

    A route value may be a JSON-able body (served with 200), an
    httpx.Response, or an exception to raise from the transport.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return sorted(r.url.path for r in self.requests)


def quota_body(*limits: dict) -> dict:
    return {"code": 200, "data": {"limits": list(limits)}}


def list_body(rows: list) -> dict:
    return {"code": 200, "data": {"list": rows}}


@pytest.fixture
def api_config():
    return build_api_config("https://api.z.ai/api/anthropic", "test-token")


@pytest.fixture
def cache(tmp_path) -> SnapshotCache:
    return SnapshotCache(tmp_path / "zai-usage-cache.json")


@pytest.fixture
def fake_api():
    def _make(quota=None, model_usage=None, tool_usage=None) -> FakeMonitorApi:
        routes = {}
        if quota is not None:
            routes[QUOTA_LIMIT_PATH] = quota
        if model_usage is not None:
            routes[MODEL_USAGE_PATH] = model_usage
        if tool_usage is not None:
            routes[TOOL_USAGE_PATH] = tool_usage
        return FakeMonitorApi(routes)

    return _make
