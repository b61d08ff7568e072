import asyncio
import logging
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from models import ApiConfig, Endpoints, TimeWindow

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 2000

SUPPORTED_DOMAINS = ("api.z.ai", "open.bigmodel.cn", "dev.bigmodel.cn")

QUOTA_LIMIT_PATH = "/api/monitor/usage/quota/limit"
MODEL_USAGE_PATH = "/api/monitor/usage/model-usage"
TOOL_USAGE_PATH = "/api/monitor/usage/tool-usage"


class UnsupportedBaseUrlError(ValueError):
    pass


class ApiError(Exception):
    pass


class ApiTimeoutError(ApiError):
    pass


class ApiStatusError(ApiError):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class ApiResponseError(ApiError):
    pass


def resolve_endpoints(base_url: str) -> Endpoints:
    """Derive the three monitor endpoints from a base URL.

    Raises UnsupportedBaseUrlError when the URL cannot be parsed or its host
    is not one of SUPPORTED_DOMAINS.
    """
    try:
        parts = urlsplit(base_url)
        host = parts.hostname or ""
    except ValueError as exc:
        raise UnsupportedBaseUrlError(f"Invalid baseUrl: {base_url!r}") from exc

    if not parts.scheme or not host:
        raise UnsupportedBaseUrlError(f"Invalid baseUrl: {base_url!r}")
    if not any(domain in host for domain in SUPPORTED_DOMAINS):
        raise UnsupportedBaseUrlError(
            f"Unsupported baseUrl. Supported domains: {', '.join(SUPPORTED_DOMAINS)}"
        )

    # The monitor API is only served over HTTPS on the default port
    origin = f"https://{host}"
    return Endpoints(
        quota_url=origin + QUOTA_LIMIT_PATH,
        model_usage_url=origin + MODEL_USAGE_PATH,
        tool_usage_url=origin + TOOL_USAGE_PATH,
    )


def build_api_config(
    base_url: str, auth_token: str, timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> ApiConfig | None:
    if not base_url or not auth_token:
        return None
    try:
        endpoints = resolve_endpoints(base_url)
    except UnsupportedBaseUrlError as exc:
        log.warning("GLM Coding Plan Statusline: %s", exc)
        return None
    return ApiConfig(**endpoints.model_dump(), auth_token=auth_token, timeout_ms=timeout_ms)


def window_query(window: TimeWindow) -> str:
    return (
        f"?startTime={quote(window.start_time, safe='')}"
        f"&endTime={quote(window.end_time, safe='')}"
    )


async def get_json(
    url: str,
    auth_token: str,
    query: str = "",
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """Single authenticated GET returning the decoded JSON body. No retries."""
    headers = {
        "Authorization": auth_token,
        "Accept-Language": "en-US,en",
        "Content-Type": "application/json",
    }
    timeout = timeout_ms / 1000
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport) as client:
            # httpx timeouts are per phase; wait_for bounds the whole request
            response = await asyncio.wait_for(client.get(url + query, headers=headers), timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise ApiTimeoutError("Request timeout") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ApiError(f"Request failed: {exc}") from exc

    if response.status_code != 200:
        raise ApiStatusError(response.status_code)
    try:
        return response.json()
    except ValueError as exc:
        raise ApiResponseError("Invalid JSON response") from exc


async def get_quota_limit(
    config: ApiConfig, transport: httpx.AsyncBaseTransport | None = None
) -> Any:
    return await get_json(config.quota_url, config.auth_token, "", config.timeout_ms, transport)


async def get_model_usage(
    config: ApiConfig, window: TimeWindow, transport: httpx.AsyncBaseTransport | None = None
) -> Any:
    return await get_json(
        config.model_usage_url, config.auth_token, window_query(window), config.timeout_ms, transport
    )


async def get_tool_usage(
    config: ApiConfig, window: TimeWindow, transport: httpx.AsyncBaseTransport | None = None
) -> Any:
    return await get_json(
        config.tool_usage_url, config.auth_token, window_query(window), config.timeout_ms, transport
    )
