"""Analytics models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["high", "medium", "low"]
InsightCategory = Literal["efficiency", "cost", "productivity", "tools", "trends"]
TrendDirection = Literal["up", "down", "stable"]
TrendStrength = Literal["strong", "moderate", "weak"]


class BasicStats(BaseModel):
    """Canonical aggregate of development activity."""

    session_count: int = 0
    total_time_seconds: float = 0.0
    total_time_hours: float = 0.0
    total_tokens: int = 0
    total_cost_usd: float = 0.0
    files_modified_count: int = 0
    files_modified: list[str] = Field(default_factory=list)
    tool_usage: dict[str, int] = Field(default_factory=dict)
    model_usage: dict[str, int] = Field(default_factory=dict)


class StatsValidation(BaseModel):
    """Outcome of validating a BasicStats record."""

    valid: bool
    corrected: BasicStats
    issues: list[str] = Field(default_factory=list)


class StatsComparison(BaseModel):
    """Percentage changes between two BasicStats records."""

    time_change: float = 0.0
    tokens_change: float = 0.0
    cost_change: float = 0.0
    files_change: float = 0.0
    sessions_change: float = 0.0
    efficiency_change: float = 0.0


class EfficiencyMetrics(BaseModel):
    """Throughput metrics and productivity score."""

    tokens_per_hour: float = 0.0
    lines_per_hour: float = 0.0
    estimated_lines_changed: int = 0
    productivity_score: float = 0.0
    cost_per_hour: float = 0.0
    efficiency_rating: str = "no data"


class ToolUsageAnalysis(BaseModel):
    """Usage and efficiency of a single tool."""

    tool_name: str
    usage_count: int = 0
    usage_rate: float = 0.0
    estimated_lines: int = 0
    efficiency_score: float = 0.0


class CostBreakdown(BaseModel):
    """Cost split by direction and model."""

    input_cost: float = 0.0
    output_cost: float = 0.0
    model_costs: dict[str, float] = Field(default_factory=dict)


class CostAnalysis(BaseModel):
    """Cost rates and optimization hints."""

    total_cost: float = 0.0
    cost_per_hour: float = 0.0
    cost_per_line: float = 0.0
    cost_breakdown: CostBreakdown = Field(default_factory=CostBreakdown)
    optimization_suggestions: list[str] = Field(default_factory=list)


class DailyMetric(BaseModel):
    """One day's rollup."""

    tokens: int = 0
    time_hours: float = 0.0
    productivity_score: float = 0.0
    cost: float = 0.0
    files_count: int = 0


class TrendResult(BaseModel):
    """Direction, strength and confidence of one metric's trend."""

    direction: TrendDirection = "stable"
    strength: TrendStrength = "weak"
    change_rate: float = 0.0
    confidence: float = 0.0
    description: str = ""


class TimeSeriesPoint(BaseModel):
    """A dated value in a metric series."""

    date: str
    value: float
    index: int = 0


class AnomalyReport(BaseModel):
    """Points lying outside the anomaly threshold."""

    anomalies: list[TimeSeriesPoint] = Field(default_factory=list)
    anomaly_threshold: float = 0.0
    analysis: str = ""


class AnomalyCounts(BaseModel):
    """Anomaly counts per metric series."""

    productivity: int = 0
    tokens: int = 0
    time: int = 0

    @property
    def total(self) -> int:
        return self.productivity + self.tokens + self.time


class SeasonalityAnalysis(BaseModel):
    """Day-of-week productivity pattern."""

    has_pattern: bool = False
    pattern_description: str = ""
    weekly_patterns: dict[str, float] = Field(default_factory=dict)
    peak_day: str | None = None


class TrendAnalysis(BaseModel):
    """Trend rates, daily rollups and optional advanced diagnostics."""

    productivity_trend: float = 0.0
    token_trend: float = 0.0
    time_trend: float = 0.0
    daily_metrics: dict[str, DailyMetric] = Field(default_factory=dict)
    trend_details: dict[str, TrendResult] = Field(default_factory=dict)
    message: str | None = None
    anomalies: AnomalyCounts | None = None
    seasonality: SeasonalityAnalysis | None = None
    confidence_score: float | None = None


class SmartInsights(BaseModel):
    """Prioritized natural-language insights."""

    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    priority: Priority = "low"
    category: InsightCategory = "productivity"


class RecommendationSet(BaseModel):
    """Action suggestions with an overall priority."""

    priority: Priority = "low"
    suggestions: list[str] = Field(default_factory=list)


class AnalysisContext(BaseModel):
    """Read-only bundle threaded through rule evaluation."""

    model_config = ConfigDict(frozen=True)

    basic_stats: BasicStats
    efficiency: EfficiencyMetrics | None = None
    trends: TrendAnalysis | None = None
    cost_analysis: CostAnalysis | None = None
    tool_analysis: list[ToolUsageAnalysis] | None = None
