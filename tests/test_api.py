"""Tests for endpoint resolution and the monitor HTTP client."""

import asyncio

import httpx
import pytest

from api import (
    ApiError,
    ApiResponseError,
    ApiStatusError,
    ApiTimeoutError,
    UnsupportedBaseUrlError,
    build_api_config,
    get_json,
    get_model_usage,
    resolve_endpoints,
    window_query,
)
from models import TimeWindow

URL = "https://api.z.ai/api/monitor/usage/quota/limit"


# ═══════════════════════ resolve_endpoints ═══════════════════════

class TestResolveEndpoints:
    def test_zai(self):
        endpoints = resolve_endpoints("https://api.z.ai/api/anthropic")
        assert endpoints.quota_url == "https://api.z.ai/api/monitor/usage/quota/limit"
        assert endpoints.model_usage_url == "https://api.z.ai/api/monitor/usage/model-usage"
        assert endpoints.tool_usage_url == "https://api.z.ai/api/monitor/usage/tool-usage"

    @pytest.mark.parametrize("domain", ["open.bigmodel.cn", "dev.bigmodel.cn"])
    def test_bigmodel_domains(self, domain):
        endpoints = resolve_endpoints(f"https://{domain}/api/anthropic")
        assert endpoints.quota_url == f"https://{domain}/api/monitor/usage/quota/limit"

    def test_always_https_default_port(self):
        endpoints = resolve_endpoints("http://api.z.ai:8080/api/anthropic")
        assert endpoints.quota_url == "https://api.z.ai/api/monitor/usage/quota/limit"
        assert endpoints.model_usage_url == "https://api.z.ai/api/monitor/usage/model-usage"
        assert endpoints.tool_usage_url == "https://api.z.ai/api/monitor/usage/tool-usage"

    @pytest.mark.parametrize(
        "base_url",
        ["https://example.com", "https://api.anthropic.com/v1", "api.z.ai", "not a url", ""],
    )
    def test_unsupported_or_unparseable(self, base_url):
        with pytest.raises(UnsupportedBaseUrlError):
            resolve_endpoints(base_url)


class TestBuildApiConfig:
    def test_builds_config(self):
        config = build_api_config("https://open.bigmodel.cn/api/anthropic", "tok", 1500)
        assert config.auth_token == "tok"
        assert config.timeout_ms == 1500
        assert config.model_usage_url.endswith("/api/monitor/usage/model-usage")

    def test_default_timeout(self):
        assert build_api_config("https://api.z.ai", "tok").timeout_ms == 2000

    def test_missing_values(self):
        assert build_api_config("", "tok") is None
        assert build_api_config("https://api.z.ai", "") is None

    def test_unsupported_domain(self, caplog):
        assert build_api_config("https://example.com", "tok") is None
        assert "Unsupported baseUrl" in caplog.text

    def test_config_is_immutable(self):
        config = build_api_config("https://api.z.ai", "tok")
        with pytest.raises(Exception):
            config.auth_token = "other"


# ═══════════════════════ get_json ═══════════════════════

def _transport(handler):
    return httpx.MockTransport(handler)


class TestGetJson:
    async def test_sends_auth_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"limits": []}})

        body = await get_json(URL, "secret-token", transport=_transport(handler))

        assert body == {"data": {"limits": []}}
        request = seen[0]
        assert request.method == "GET"
        assert request.headers["Authorization"] == "secret-token"
        assert request.headers["Accept-Language"] == "en-US,en"
        assert request.headers["Content-Type"] == "application/json"

    async def test_non_200_is_status_error(self):
        transport = _transport(lambda request: httpx.Response(401, json={"msg": "no"}))
        with pytest.raises(ApiStatusError) as excinfo:
            await get_json(URL, "tok", transport=transport)
        assert excinfo.value.status_code == 401

    async def test_invalid_json(self):
        transport = _transport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(ApiResponseError):
            await get_json(URL, "tok", transport=transport)

    async def test_transport_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow")

        with pytest.raises(ApiTimeoutError):
            await get_json(URL, "tok", transport=_transport(handler))

    async def test_hard_timeout_aborts_request(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        with pytest.raises(ApiTimeoutError):
            await get_json(URL, "tok", timeout_ms=50, transport=_transport(handler))

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(ApiError):
            await get_json(URL, "tok", transport=_transport(handler))

    async def test_window_query_is_url_encoded(self, api_config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"list": []}})

        window = TimeWindow(start_time="2026-10-19 07:00:00", end_time="2026-10-19 12:00:00")
        await get_model_usage(api_config, window, transport=_transport(handler))

        params = seen[0].url.params
        assert seen[0].url.path == "/api/monitor/usage/model-usage"
        assert params["startTime"] == "2026-10-19 07:00:00"
        assert params["endTime"] == "2026-10-19 12:00:00"


def test_window_query_format():
    window = TimeWindow(start_time="2026-10-19 07:00:00", end_time="2026-10-19 12:00:00")
    assert window_query(window) == (
        "?startTime=2026-10-19%2007%3A00%3A00&endTime=2026-10-19%2012%3A00%3A00"
    )
