import logging
from typing import Any

import httpx

from api import ApiError, get_tool_usage
from models import ApiConfig, TimeWindow

log = logging.getLogger(__name__)

# Rough estimate: each tool-usage row in the window counts as 5%.
PERCENT_PER_ROW = 5


def tool_percent(body: Any) -> int:
    rows = body["data"]["list"]
    if not isinstance(rows, list):
        raise TypeError("data.list is not a list")
    return min(100, len(rows) * PERCENT_PER_ROW)


async def collect(
    config: ApiConfig,
    window: TimeWindow,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    try:
        body = await get_tool_usage(config, window, transport=transport)
        return tool_percent(body)
    except (ApiError, KeyError, TypeError, ValueError) as exc:
        log.debug("Tool usage fetch failed: %s", exc)
        return 0
