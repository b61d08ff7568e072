import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

import httpx

from cache import SnapshotCache
from collectors import model_usage, quota, tool_usage
from models import ApiConfig, SetupRequired, TimeWindow, Transient, UsageResult, UsageSnapshot
from timefmt import epoch_ms, format_datetime

log = logging.getLogger(__name__)

USAGE_WINDOW = timedelta(hours=5)


def usage_window(now: datetime) -> TimeWindow:
    return TimeWindow(
        start_time=format_datetime(now - USAGE_WINDOW),
        end_time=format_datetime(now),
    )


async def fetch_usage(
    config: ApiConfig | None,
    cache: SnapshotCache,
    clock: Callable[[], datetime] = datetime.now,
    transport: httpx.AsyncBaseTransport | None = None,
) -> UsageResult:
    """Return a usage snapshot, reusing the cached one while it is fresh.

    A cache hit never touches the network. On a miss the quota, model-usage
    and tool-usage endpoints are queried concurrently; each collector absorbs
    its own failure into a default, so the join itself cannot fail.
    """
    cached = cache.load()
    try:
        now = clock()
        if cache.is_valid(cached, epoch_ms(now)):
            return cached.data

        if config is None:
            return SetupRequired()

        window = usage_window(now)
        quota_result, model_result, tool_percent = await asyncio.gather(
            quota.collect(config, transport=transport, now=now),
            model_usage.collect(config, window, transport=transport),
            tool_usage.collect(config, window, transport=transport),
        )

        # Tool usage is the primary source for the tool slot when present
        mcp_percent = quota_result.mcp_percent
        if tool_percent > 0:
            mcp_percent = tool_percent

        snapshot = UsageSnapshot(
            token_percent=quota_result.token_percent,
            mcp_percent=mcp_percent,
            total_cost=model_result.total_cost,
            model_name=model_result.model_name,
            timestamp=epoch_ms(clock()),
            next_reset_time=quota_result.next_reset_time,
            next_reset_time_str=quota_result.next_reset_time_str,
        )
    except Exception:
        log.debug("Usage aggregation failed", exc_info=True)
        return Transient()

    cache.save(snapshot)
    return snapshot
