"""Request and report models exchanged with callers."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ccstats.models.analytics import (
    BasicStats,
    EfficiencyMetrics,
    RecommendationSet,
    SmartInsights,
    StatsComparison,
    ToolUsageAnalysis,
    TrendAnalysis,
)

Timeframe = Literal["today", "week", "month", "custom"]
AnalysisType = Literal["basic", "efficiency", "trends", "insights"]
AvailabilityStatus = Literal["excellent", "good", "limited", "unavailable"]


class AnalysisRequest(BaseModel):
    """What a caller wants analyzed."""

    project_path: str = ""
    timeframe: Timeframe = "today"
    custom_range: tuple[datetime, datetime] | None = None
    analysis_types: list[AnalysisType] | None = None


class TimeframeRange(BaseModel):
    """Resolved start/end of a timeframe."""

    start: datetime
    end: datetime
    description: str
    is_single_day: bool = False


class DataQuality(BaseModel):
    """Completeness, reliability and freshness, each in [0, 1]."""

    completeness: float = 0.0
    reliability: float = 0.0
    freshness: float = 0.0


class AnalysisResult(BaseModel):
    """Report bundling whichever analyses were requested."""

    timeframe: str
    project_path: str = ""
    basic_stats: BasicStats | None = None
    efficiency: EfficiencyMetrics | None = None
    trends: TrendAnalysis | None = None
    insights: SmartInsights | None = None
    recommendations: RecommendationSet | None = None
    data_source: str = ""
    generated_at: str = ""
    data_quality: DataQuality = Field(default_factory=DataQuality)


class ComparisonReport(BaseModel):
    """Two reports and the deltas between them."""

    current: AnalysisResult
    previous: AnalysisResult
    comparison: StatsComparison
    insights: list[str] = Field(default_factory=list)


class QuickAnalysis(BaseModel):
    """Basic stats and efficiency with a one-line summary."""

    basic_stats: BasicStats
    efficiency: EfficiencyMetrics
    summary: str


class ToolUsageReport(BaseModel):
    """Per-tool analysis with an overall tool efficiency score."""

    tool_analysis: list[ToolUsageAnalysis] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    efficiency_score: float = 0.0


class DataAvailability(BaseModel):
    """Provider availability flags and an overall status."""

    cost_api: bool = False
    opentelemetry: bool = False
    overall_status: AvailabilityStatus = "unavailable"
    recommendations: list[str] = Field(default_factory=list)
