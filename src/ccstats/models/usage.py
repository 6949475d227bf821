"""Raw usage models produced by data providers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenCounts(BaseModel):
    """Token counts for one measurement."""

    model_config = ConfigDict(frozen=True)

    input: int = 0
    output: int = 0
    total: int = 0

    @property
    def effective_total(self) -> int:
        if self.total:
            return self.total
        return self.input + self.output


class CostFigures(BaseModel):
    """Cost figures in USD."""

    model_config = ConfigDict(frozen=True)

    input: float = 0.0
    output: float = 0.0
    total: float = 0.0


class UsageSnapshot(BaseModel):
    """One raw usage measurement from a data source."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = ""
    project: str = ""
    tokens: TokenCounts = Field(default_factory=TokenCounts)
    costs: CostFigures = Field(default_factory=CostFigures)
    duration_minutes: float = 0.0
    message_count: int = 0
    session_count: int = 0
    tool_usage: dict[str, int] = Field(default_factory=dict)
    files_modified_count: int = 0
    files_modified: list[str] = Field(default_factory=list)
    model: str = ""
    source: str = "cost_api"


class UsageBundle(BaseModel):
    """Everything a provider returns for one project and timeframe."""

    snapshot: UsageSnapshot = Field(default_factory=UsageSnapshot)
    history: list[UsageSnapshot] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    completeness: float = 0.0
    last_updated: str = ""


class DataSourceAvailability(BaseModel):
    """Which data sources a provider can currently reach."""

    cost_api: bool = False
    opentelemetry: bool = False
