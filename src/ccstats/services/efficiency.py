"""Efficiency metrics, productivity score, tool and cost analysis."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import (
    BasicStats,
    CostAnalysis,
    CostBreakdown,
    EfficiencyMetrics,
    ToolUsageAnalysis,
)
from ccstats.services._numeric import (
    active_tool_count,
    clamp,
    non_negative_int,
    round_to,
    safe_div,
)
from ccstats.services.code_estimator import CodeVolumeEstimator

logger = logging.getLogger(__name__)

NO_DATA_RATING = "no data"

# Lowest score for each rating, checked top-down
RATING_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (8.5, "exceptional"),
    (7.0, "excellent"),
    (5.5, "good"),
    (4.0, "fair"),
    (2.5, "needs improvement"),
)
LOWEST_RATING = "poor"

INPUT_COST_SHARE = 0.3
OUTPUT_COST_SHARE = 0.7


def efficiency_rating(score: float) -> str:
    """Map a 0-10 productivity score onto its rating label."""
    for threshold, label in RATING_THRESHOLDS:
        if score >= threshold:
            return label
    return LOWEST_RATING


def no_data_metrics() -> EfficiencyMetrics:
    return EfficiencyMetrics(efficiency_rating=NO_DATA_RATING)


class EfficiencyScorer:
    """Computes throughput metrics and a bounded productivity score."""

    def __init__(
        self,
        estimator: CodeVolumeEstimator | None = None,
        config: AnalyticsConfig | None = None,
    ) -> None:
        self._config = config or AnalyticsConfig()
        self._estimator = estimator or CodeVolumeEstimator(self._config)

    @property
    def estimator(self) -> CodeVolumeEstimator:
        return self._estimator

    def calculate_efficiency_metrics(self, stats: BasicStats) -> EfficiencyMetrics:
        """Derive efficiency metrics; zero hours yields the "no data" record."""
        if stats.total_time_hours <= 0:
            logger.warning("No development time recorded, returning empty efficiency metrics")
            return no_data_metrics()

        try:
            hours = stats.total_time_hours
            lines = self._estimator.estimate_lines_changed(stats.tool_usage)
            tokens_per_hour = stats.total_tokens / hours
            lines_per_hour = lines / hours
            cost_per_hour = stats.total_cost_usd / hours

            score = round_to(
                self.productivity_score(
                    tokens_per_hour,
                    lines_per_hour,
                    stats.tool_usage,
                    stats.session_count,
                    hours,
                ),
                1,
            )
            metrics = EfficiencyMetrics(
                tokens_per_hour=round_to(tokens_per_hour, 1),
                lines_per_hour=round_to(lines_per_hour, 1),
                estimated_lines_changed=lines,
                productivity_score=score,
                cost_per_hour=round_to(cost_per_hour, 2),
                efficiency_rating=efficiency_rating(score),
            )
        except Exception:
            logger.exception("Failed to calculate efficiency metrics")
            return no_data_metrics()
        logger.debug("Efficiency metrics: %s", metrics)
        return metrics

    def productivity_score(
        self,
        tokens_per_hour: float,
        lines_per_hour: float,
        tool_usage: Mapping[str, int],
        session_count: int,
        total_hours: float,
    ) -> float:
        """Weighted 0-10 composite of token, lines, tool and session sub-scores."""
        weights = self._config.productivity_weights

        token_score = min(3.0, tokens_per_hour / 1500 * 3)
        lines_score = min(4.0, lines_per_hour / 100 * 4)
        tools_score = min(2.0, active_tool_count(tool_usage) / 6 * 2)
        hours_per_session = total_hours / session_count if session_count > 0 else total_hours
        session_score = 0.5 if hours_per_session > 2 else 1.0

        raw = (
            token_score * weights.token_weight
            + lines_score * weights.lines_weight
            + tools_score * weights.tools_weight
            + session_score * weights.session_weight
        )
        score = safe_div(raw, self._config.productivity_max) * 10
        logger.debug(
            "Productivity sub-scores: tokens=%.2f lines=%.2f tools=%.2f session=%.2f -> %.2f",
            token_score,
            lines_score,
            tools_score,
            session_score,
            score,
        )
        return clamp(score, 0.0, 10.0)

    def analyze_tool_usage(
        self, tool_usage: Mapping[str, int], total_hours: float
    ) -> list[ToolUsageAnalysis]:
        """Per-tool rate, estimated lines and efficiency, most used first."""
        analyses: list[ToolUsageAnalysis] = []
        for tool, raw_count in tool_usage.items():
            count = non_negative_int(raw_count)
            rate = safe_div(count, total_hours)
            lines = self._estimator.estimate_lines_changed({tool: count})
            analyses.append(
                ToolUsageAnalysis(
                    tool_name=tool,
                    usage_count=count,
                    usage_rate=round_to(rate, 2),
                    estimated_lines=lines,
                    efficiency_score=round_to(self._tool_score(tool, rate, lines), 1),
                )
            )
        analyses.sort(key=lambda a: a.usage_count, reverse=True)
        return analyses

    def _tool_score(self, tool: str, usage_rate: float, estimated_lines: int) -> float:
        base = self._config.tool_base_scores.get(tool, self._config.default_tool_score)
        if estimated_lines > 50:
            lines_factor = 1.2
        elif estimated_lines > 20:
            lines_factor = 1.0
        else:
            lines_factor = 0.8
        # Moderate usage scores best
        if usage_rate > 3:
            rate_factor = 0.9
        elif usage_rate > 1:
            rate_factor = 1.0
        else:
            rate_factor = 0.8
        return min(10.0, base * lines_factor * rate_factor)

    def calculate_cost_analysis(self, stats: BasicStats) -> CostAnalysis:
        """Cost rates, an assumed input/output split and optimization hints."""
        lines = self._estimator.estimate_lines_changed(stats.tool_usage)
        cost = stats.total_cost_usd
        cost_per_hour = safe_div(cost, stats.total_time_hours)
        cost_per_line = safe_div(cost, lines)

        total_model_tokens = sum(stats.model_usage.values())
        model_costs = {
            model: round_to(safe_div(cost * tokens, total_model_tokens), 4)
            for model, tokens in stats.model_usage.items()
        }

        return CostAnalysis(
            total_cost=cost,
            cost_per_hour=round_to(cost_per_hour, 2),
            cost_per_line=round_to(cost_per_line, 4),
            cost_breakdown=CostBreakdown(
                input_cost=round_to(cost * INPUT_COST_SHARE, 4),
                output_cost=round_to(cost * OUTPUT_COST_SHARE, 4),
                model_costs=model_costs,
            ),
            optimization_suggestions=self._cost_suggestions(cost_per_hour, cost_per_line, stats),
        )

    def _cost_suggestions(
        self, cost_per_hour: float, cost_per_line: float, stats: BasicStats
    ) -> list[str]:
        suggestions: list[str] = []
        if cost_per_hour > 15:
            suggestions.append(
                "Hourly cost is high; ask more focused questions and avoid long back-and-forth"
            )
        if cost_per_line > 0.1:
            suggestions.append("Cost per line is high; give more precise instructions")
        if stats.tool_usage.get("Read", 0) > stats.tool_usage.get("Edit", 0) * 2:
            suggestions.append(
                "Many read operations; settle requirements up front to avoid re-reading files"
            )
        if stats.session_count > 10:
            suggestions.append(
                "Many sessions; batch related tasks together to reduce context switching"
            )
        return suggestions
