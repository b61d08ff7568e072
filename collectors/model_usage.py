import logging
from typing import Any

import httpx

from api import ApiError, get_model_usage
from model_mapper import map_model_name
from models import ApiConfig, ModelUsageResult, TimeWindow

log = logging.getLogger(__name__)

# $/MTok, approximate list price for the Opus-class tier
INPUT_PRICE = 3
OUTPUT_PRICE = 15


def calculate_cost(rows: list[dict]) -> str:
    total_input = sum(row.get("inputTokens") or 0 for row in rows)
    total_output = sum(row.get("outputTokens") or 0 for row in rows)
    cost = total_input / 1_000_000 * INPUT_PRICE + total_output / 1_000_000 * OUTPUT_PRICE
    return f"{cost:.2f}"


def parse_model_usage(body: Any) -> ModelUsageResult:
    rows = body["data"]["list"]
    if not isinstance(rows, list) or not rows:
        return ModelUsageResult()

    return ModelUsageResult(
        total_cost=calculate_cost(rows),
        model_name=map_model_name(rows[0].get("model") or "Unknown"),
        has_data=True,
    )


async def collect(
    config: ApiConfig,
    window: TimeWindow,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ModelUsageResult:
    try:
        body = await get_model_usage(config, window, transport=transport)
        return parse_model_usage(body)
    except (ApiError, KeyError, TypeError, ValueError, AttributeError) as exc:
        log.debug("Model usage fetch failed: %s", exc)
        return ModelUsageResult()
