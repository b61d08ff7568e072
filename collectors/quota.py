import logging
import math
from datetime import datetime
from typing import Any

import httpx

from api import ApiError, get_quota_limit
from models import ApiConfig, QuotaResult
from timefmt import format_reset_time

log = logging.getLogger(__name__)

TOKENS_LIMIT = "TOKENS_LIMIT"
TIME_LIMIT = "TIME_LIMIT"


def _round_percent(value: Any) -> int:
    # round half up: 12.5 -> 13
    return int(math.floor(float(value or 0) + 0.5))


def _reset_time(value: Any, now: datetime | None) -> tuple[int | None, str | None]:
    # A bad nextResetTime drops only the reset time, not the percentages
    if not value:
        return None, None
    try:
        timestamp = int(value)
        return timestamp, format_reset_time(timestamp, now)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        log.debug("Ignoring unusable nextResetTime %r: %s", value, exc)
        return None, None


def parse_limits(body: Any, now: datetime | None = None) -> QuotaResult:
    """Extract token and time-limit percentages from a quota/limit response.

    When a limit type appears more than once, the last entry wins.
    """
    limits = body["data"]["limits"]
    if not isinstance(limits, list):
        raise TypeError("data.limits is not a list")

    token_percent = 0
    mcp_percent = 0
    next_reset_time: Any = None
    for limit in limits:
        limit_type = limit.get("type")
        if limit_type == TOKENS_LIMIT:
            token_percent = _round_percent(limit.get("percentage"))
            next_reset_time = limit.get("nextResetTime")
        elif limit_type == TIME_LIMIT:
            mcp_percent = _round_percent(limit.get("percentage"))

    next_reset_time, next_reset_time_str = _reset_time(next_reset_time, now)
    return QuotaResult(
        token_percent=token_percent,
        mcp_percent=mcp_percent,
        next_reset_time=next_reset_time,
        next_reset_time_str=next_reset_time_str,
    )


async def collect(
    config: ApiConfig,
    transport: httpx.AsyncBaseTransport | None = None,
    now: datetime | None = None,
) -> QuotaResult:
    try:
        body = await get_quota_limit(config, transport=transport)
        return parse_limits(body, now)
    except (ApiError, KeyError, TypeError, ValueError, AttributeError, OverflowError, OSError) as exc:
        log.debug("Quota limit fetch failed: %s", exc)
        return QuotaResult()
