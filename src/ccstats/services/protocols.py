"""Protocol definitions for analytics components."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ccstats.models.analytics import (
    AnalysisContext,
    BasicStats,
    CostAnalysis,
    EfficiencyMetrics,
    RecommendationSet,
    SmartInsights,
    ToolUsageAnalysis,
    TrendAnalysis,
)


class TrendAnalyzerProtocol(Protocol):
    """Interface shared by the basic and advanced trend engines."""

    def analyze_trends(
        self, history: Sequence[BasicStats], timeframe: str = "week"
    ) -> TrendAnalysis: ...


class EfficiencyScorerProtocol(Protocol):
    """Interface for efficiency, tool and cost scoring."""

    def calculate_efficiency_metrics(self, stats: BasicStats) -> EfficiencyMetrics: ...

    def analyze_tool_usage(
        self, tool_usage: dict[str, int], total_hours: float
    ) -> list[ToolUsageAnalysis]: ...

    def calculate_cost_analysis(self, stats: BasicStats) -> CostAnalysis: ...


class InsightGeneratorProtocol(Protocol):
    """Interface for insight generation."""

    def generate_insights(self, context: AnalysisContext) -> SmartInsights: ...


class RecommendationGeneratorProtocol(Protocol):
    """Interface for standalone recommendations."""

    def generate_recommendations(
        self,
        stats: BasicStats,
        efficiency: EfficiencyMetrics,
        trends: TrendAnalysis | None = None,
        cost_analysis: CostAnalysis | None = None,
    ) -> RecommendationSet: ...
