from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Endpoints(BaseModel):
    quota_url: str
    model_usage_url: str
    tool_usage_url: str


class ApiConfig(Endpoints):
    """Resolved once per process; passed explicitly to the aggregator."""

    model_config = ConfigDict(frozen=True)

    auth_token: str
    timeout_ms: int = 2000


class TimeWindow(BaseModel):
    start_time: str  # yyyy-MM-dd HH:mm:ss, local time
    end_time: str


class QuotaResult(BaseModel):
    token_percent: int = 0
    mcp_percent: int = 0  # TIME_LIMIT percentage, fallback for the tool slot
    next_reset_time: int | None = None  # epoch ms
    next_reset_time_str: str | None = None


class ModelUsageResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    total_cost: str = "0.00"
    model_name: str = "Unknown"
    has_data: bool = False


class UsageSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    kind: Literal["ok"] = "ok"
    token_percent: int = 0
    mcp_percent: int = 0
    total_cost: str = "0.00"
    model_name: str = "Unknown"
    timestamp: int  # epoch ms
    next_reset_time: int | None = None
    next_reset_time_str: str | None = None


class SetupRequired(BaseModel):
    """No usable credentials or endpoints; nothing can be fetched."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["setup_required"] = "setup_required"


class Transient(BaseModel):
    """Aggregation failed unexpectedly; the next refresh may succeed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["loading"] = "loading"


UsageResult = Annotated[
    Union[UsageSnapshot, SetupRequired, Transient],
    Field(discriminator="kind"),
]


class CacheEntry(BaseModel):
    data: UsageSnapshot
    timestamp: int  # epoch ms


# Session context piped in on stdin by the plugin host

class SessionModel(BaseModel):
    display_name: str | None = None


class SessionWorkspace(BaseModel):
    current_dir: str | None = None
    project_dir: str | None = None


class SessionContextWindow(BaseModel):
    context_window_size: int | None = None
    total_input_tokens: int | None = None
    total_output_tokens: int | None = None


class SessionCost(BaseModel):
    total_cost_usd: float | None = None
    total_duration_ms: int | None = None


class SessionContext(BaseModel):
    model: SessionModel | None = None
    workspace: SessionWorkspace | None = None
    context_window: SessionContextWindow | None = None
    cost: SessionCost | None = None
    version: str | None = None
