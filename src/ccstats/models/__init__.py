"""Pydantic models for ccstats."""

from ccstats.models.analytics import (
    AnalysisContext,
    AnomalyCounts,
    AnomalyReport,
    BasicStats,
    CostAnalysis,
    CostBreakdown,
    DailyMetric,
    EfficiencyMetrics,
    InsightCategory,
    Priority,
    RecommendationSet,
    SeasonalityAnalysis,
    SmartInsights,
    StatsComparison,
    StatsValidation,
    TimeSeriesPoint,
    ToolUsageAnalysis,
    TrendAnalysis,
    TrendResult,
)
from ccstats.models.reports import (
    AnalysisRequest,
    AnalysisResult,
    ComparisonReport,
    DataAvailability,
    DataQuality,
    QuickAnalysis,
    TimeframeRange,
    ToolUsageReport,
)
from ccstats.models.usage import (
    CostFigures,
    DataSourceAvailability,
    TokenCounts,
    UsageBundle,
    UsageSnapshot,
)

__all__ = [
    "AnalysisContext",
    "AnalysisRequest",
    "AnalysisResult",
    "AnomalyCounts",
    "AnomalyReport",
    "BasicStats",
    "ComparisonReport",
    "CostAnalysis",
    "CostBreakdown",
    "CostFigures",
    "DailyMetric",
    "DataAvailability",
    "DataQuality",
    "DataSourceAvailability",
    "EfficiencyMetrics",
    "InsightCategory",
    "Priority",
    "QuickAnalysis",
    "RecommendationSet",
    "SeasonalityAnalysis",
    "SmartInsights",
    "StatsComparison",
    "StatsValidation",
    "TimeSeriesPoint",
    "TimeframeRange",
    "TokenCounts",
    "ToolUsageAnalysis",
    "ToolUsageReport",
    "TrendAnalysis",
    "TrendResult",
    "UsageBundle",
    "UsageSnapshot",
]
