"""Action suggestions derived independently of the insight rules."""

from __future__ import annotations

import logging

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import (
    AnalysisContext,
    BasicStats,
    CostAnalysis,
    EfficiencyMetrics,
    Priority,
    RecommendationSet,
    TrendAnalysis,
)

logger = logging.getLogger(__name__)


def recommendation_priority(
    efficiency: EfficiencyMetrics, trends: TrendAnalysis | None
) -> Priority:
    score = efficiency.productivity_score
    trend = trends.productivity_trend if trends else 0.0
    if score < 4 or trend < -15:
        return "high"
    if score < 6 or abs(trend) > 10:
        return "medium"
    return "low"


class RecommendationEngine:
    """Builds a de-duplicated, capped list of suggestions from four sources."""

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        self._config = config or AnalyticsConfig()

    def generate_recommendations(
        self,
        stats: BasicStats,
        efficiency: EfficiencyMetrics,
        trends: TrendAnalysis | None = None,
        cost_analysis: CostAnalysis | None = None,
    ) -> RecommendationSet:
        context = AnalysisContext(
            basic_stats=stats,
            efficiency=efficiency,
            trends=trends,
            cost_analysis=cost_analysis,
        )
        return RecommendationSet(
            priority=recommendation_priority(efficiency, trends),
            suggestions=self.generate_personalized_recommendations(context),
        )

    def generate_personalized_recommendations(self, context: AnalysisContext) -> list[str]:
        suggestions: list[str] = []
        try:
            if context.efficiency:
                suggestions.extend(efficiency_recommendations(context.efficiency))
            suggestions.extend(tool_recommendations(context.basic_stats))
            if context.trends:
                suggestions.extend(trend_recommendations(context.trends))
            if context.cost_analysis:
                suggestions.extend(cost_recommendations(context.cost_analysis))
        except Exception:
            logger.exception("Failed to generate recommendations")
            return []

        unique = list(dict.fromkeys(suggestions))
        logger.debug("Generated %d unique recommendations", len(unique))
        return unique[: self._config.max_recommendations]


def efficiency_recommendations(efficiency: EfficiencyMetrics) -> list[str]:
    suggestions: list[str] = []
    if efficiency.productivity_score < 5:
        suggestions.append("Try the Pomodoro technique: 25 minutes of focus, then a 5 minute break")
        suggestions.append("Check whether distractions are breaking your concentration")
    elif efficiency.productivity_score > 7:
        suggestions.append("Keep working this efficiently and write down what is working")
        suggestions.append("Hold this rhythm but take regular breaks to avoid fatigue")

    if efficiency.lines_per_hour < 30:
        suggestions.append("Use MultiEdit for batch changes to speed up code editing")
    if efficiency.tokens_per_hour > 1800:
        suggestions.append("Keep prompts concise and avoid restating the same context")
    return suggestions


def tool_recommendations(stats: BasicStats) -> list[str]:
    usage = stats.tool_usage
    suggestions: list[str] = []
    if not usage.get("Grep") and not usage.get("Glob"):
        suggestions.append("Use the Grep and Glob tools for fast code search")
    if not usage.get("Task"):
        suggestions.append("Use the Task tool to break down and delegate complex work")

    edits = usage.get("Edit", 0) + usage.get("MultiEdit", 0)
    if usage.get("Read", 0) > edits * 3:
        suggestions.append("Lots of reading; settle requirements before coding to avoid re-reading")
    return suggestions


def trend_recommendations(trends: TrendAnalysis) -> list[str]:
    suggestions: list[str] = []
    if trends.productivity_trend < -10:
        suggestions.append("Productivity is falling; review what changed in your recent workflow")
        suggestions.append("Consider adjusting your working environment or schedule")
    if trends.token_trend > 20:
        suggestions.append("Token usage is growing quickly; look for ways to streamline prompts")
    return suggestions


def cost_recommendations(cost_analysis: CostAnalysis) -> list[str]:
    suggestions: list[str] = []
    if cost_analysis.cost_per_hour > 15:
        suggestions.append("Hourly cost is high; prepare questions ahead and batch related asks")
    if cost_analysis.cost_per_line > 0.08:
        suggestions.append("Cost per line is high; let the assistant write larger changes per turn")
    return suggestions
