"""Analytics orchestrator: end-to-end reports over an injected data provider."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import AnalysisContext, StatsComparison, ToolUsageAnalysis
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
from ccstats.services._numeric import clamp, round_to
from ccstats.services.basic_stats import BasicStatsAggregator, StatsComparator
from ccstats.services.efficiency import EfficiencyScorer
from ccstats.services.insights import InsightRuleEngine
from ccstats.services.recommendations import RecommendationEngine
from ccstats.services.trends import AdvancedTrendEngine

if TYPE_CHECKING:
    from ccstats.data.protocols import UsageDataProvider
    from ccstats.models.analytics import BasicStats, CostAnalysis
    from ccstats.models.usage import UsageBundle
    from ccstats.services.protocols import (
        EfficiencyScorerProtocol,
        InsightGeneratorProtocol,
        RecommendationGeneratorProtocol,
        TrendAnalyzerProtocol,
    )

logger = logging.getLogger(__name__)

BASE_RELIABILITY = 0.5
SOURCE_RELIABILITY: dict[str, float] = {"cost_api": 0.3, "opentelemetry": 0.2}
FRESHNESS_WINDOW_HOURS = 24


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def data_reliability(sources: list[str]) -> float:
    """Base reliability plus a bonus for each trusted source, capped at 1."""
    bonus = sum(SOURCE_RELIABILITY.get(source, 0.0) for source in set(sources))
    return min(1.0, BASE_RELIABILITY + bonus)


def data_freshness(last_updated: str, now: datetime) -> float:
    """1.0 for data updated just now, falling linearly to 0 after 24 hours."""
    if not last_updated:
        return 0.0
    try:
        updated = datetime.fromisoformat(last_updated)
    except ValueError:
        logger.warning("Unparseable last_updated timestamp: %s", last_updated)
        return 0.0
    age_hours = (_as_aware(now) - _as_aware(updated)).total_seconds() / 3600
    return clamp((FRESHNESS_WINDOW_HOURS - age_hours) / FRESHNESS_WINDOW_HOURS, 0.0, 1.0)


def comparison_insights(comparison: StatsComparison) -> list[str]:
    insights: list[str] = []
    if abs(comparison.time_change) > 20:
        direction = "increased" if comparison.time_change > 0 else "decreased"
        insights.append(f"Working time {direction} by {abs(comparison.time_change):.1f}%")
    if abs(comparison.efficiency_change) > 15:
        direction = "improved" if comparison.efficiency_change > 0 else "dropped"
        insights.append(
            f"Development efficiency {direction} by {abs(comparison.efficiency_change):.1f}%"
        )
    if abs(comparison.cost_change) > 25:
        direction = "increased" if comparison.cost_change > 0 else "decreased"
        insights.append(f"Cost {direction} by {abs(comparison.cost_change):.1f}%")
    return insights


def tool_usage_recommendations(
    tool_analysis: list[ToolUsageAnalysis], stats: BasicStats
) -> list[str]:
    recommendations: list[str] = []
    low_efficiency = [t for t in tool_analysis if t.efficiency_score < 5]
    if low_efficiency:
        recommendations.append(
            f"{low_efficiency[0].tool_name} is used inefficiently; review how it is being used"
        )
    if len(tool_analysis) < 3:
        recommendations.append("Few tools in use; try more of the available tools")
    reads = stats.tool_usage.get("Read", 0)
    writes = stats.tool_usage.get("Edit", 0) + stats.tool_usage.get("Write", 0)
    if reads > writes * 2:
        recommendations.append(
            "Many read operations; settle requirements up front to avoid re-reading"
        )
    return recommendations


class AnalyticsOrchestrator:
    """Composes the analytics components into report generation.

    All collaborators are injected; defaults are fresh instances built from
    ``config``, so no state is shared between orchestrators.
    """

    def __init__(
        self,
        provider: UsageDataProvider,
        *,
        config: AnalyticsConfig | None = None,
        aggregator: BasicStatsAggregator | None = None,
        comparator: StatsComparator | None = None,
        scorer: EfficiencyScorerProtocol | None = None,
        trend_engine: TrendAnalyzerProtocol | None = None,
        insight_engine: InsightGeneratorProtocol | None = None,
        recommendation_engine: RecommendationGeneratorProtocol | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._provider = provider
        self._config = config or AnalyticsConfig()
        self._aggregator = aggregator or BasicStatsAggregator(self._config)
        self._comparator = comparator or StatsComparator()
        self._scorer = scorer or EfficiencyScorer(config=self._config)
        self._trends = trend_engine or AdvancedTrendEngine(config=self._config)
        self._insights = insight_engine or InsightRuleEngine(config=self._config)
        self._recommendations = recommendation_engine or RecommendationEngine(self._config)
        self._clock = clock

    def parse_timeframe(
        self,
        timeframe: str,
        custom_range: tuple[datetime, datetime] | None = None,
    ) -> TimeframeRange:
        """Resolve a timeframe keyword into concrete start/end datetimes."""
        now = self._clock()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        match timeframe:
            case "week":
                return TimeframeRange(
                    start=today - timedelta(days=7), end=now, description="Last 7 days"
                )
            case "month":
                return TimeframeRange(start=today.replace(day=1), end=now, description="This month")
            case "custom" if custom_range is not None:
                start, end = custom_range
                return TimeframeRange(
                    start=start,
                    end=end,
                    description=f"{start.date().isoformat()} - {end.date().isoformat()}",
                    is_single_day=start.date() == end.date(),
                )
            case _:
                return TimeframeRange(
                    start=today,
                    end=today + timedelta(days=1),
                    description="Today",
                    is_single_day=True,
                )

    def generate_report(self, request: AnalysisRequest) -> Result[AnalysisResult, str]:
        """Build a report containing only the requested analyses.

        Returns:
            Ok with AnalysisResult, or Err if the provider could not supply data.
        """
        logger.info(
            "Generating %s report for %s", request.timeframe, request.project_path or "all projects"
        )
        if request.analysis_types is None:
            requested = set(self._config.enabled_analyses)
        else:
            requested = set(request.analysis_types)
        window = self.parse_timeframe(request.timeframe, request.custom_range)

        fetched = self._fetch(request.project_path, window)
        if isinstance(fetched, Err):
            return fetched
        bundle = fetched.ok_value

        stats = self._aggregator.calculate_from_snapshot(bundle.snapshot)
        efficiency = self._scorer.calculate_efficiency_metrics(stats)

        trends = None
        if requested & {"trends", "insights"}:
            history = [self._aggregator.calculate_from_snapshot(s) for s in bundle.history]
            trends = self._trends.analyze_trends(history, request.timeframe)

        insights = None
        recommendations = None
        if "insights" in requested:
            cost_analysis: CostAnalysis = self._scorer.calculate_cost_analysis(stats)
            context = AnalysisContext(
                basic_stats=stats,
                efficiency=efficiency,
                trends=trends,
                cost_analysis=cost_analysis,
                tool_analysis=self._scorer.analyze_tool_usage(
                    stats.tool_usage, stats.total_time_hours
                ),
            )
            insights = self._insights.generate_insights(context)
            recommendations = self._recommendations.generate_recommendations(
                stats, efficiency, trends, cost_analysis
            )

        now = self._clock()
        result = AnalysisResult(
            timeframe=window.description,
            project_path=request.project_path,
            basic_stats=stats if "basic" in requested else None,
            efficiency=efficiency if "efficiency" in requested else None,
            trends=trends if "trends" in requested else None,
            insights=insights,
            recommendations=recommendations,
            data_source=", ".join(bundle.sources) or bundle.snapshot.source,
            generated_at=now.isoformat(),
            data_quality=self._data_quality(bundle, now),
        )
        logger.info(
            "Report ready: timeframe=%s source=%s trends=%s insights=%s",
            result.timeframe,
            result.data_source,
            result.trends is not None,
            result.insights is not None,
        )
        return Ok(result)

    def quick_analysis(self, project_path: str = "") -> Result[QuickAnalysis, str]:
        """Today's basic stats and efficiency with a one-line summary."""
        fetched = self._fetch(project_path, self.parse_timeframe("today"))
        if isinstance(fetched, Err):
            return fetched

        stats = self._aggregator.calculate_from_snapshot(fetched.ok_value.snapshot)
        efficiency = self._scorer.calculate_efficiency_metrics(stats)
        summary = (
            f"Today: {stats.total_time_hours:.1f} hours, {stats.total_tokens} tokens, "
            f"productivity {efficiency.productivity_score:.1f}/10 ({efficiency.efficiency_rating})"
        )
        return Ok(QuickAnalysis(basic_stats=stats, efficiency=efficiency, summary=summary))

    def compare_analysis(
        self, current_request: AnalysisRequest, previous_request: AnalysisRequest
    ) -> Result[ComparisonReport, str]:
        """Generate two reports and the percentage deltas between them."""
        current = self.generate_report(_with_basic(current_request))
        if isinstance(current, Err):
            return current
        previous = self.generate_report(_with_basic(previous_request))
        if isinstance(previous, Err):
            return previous

        current_stats = current.ok_value.basic_stats
        previous_stats = previous.ok_value.basic_stats
        if current_stats is None or previous_stats is None:
            return Err("Comparison requires basic stats for both periods")

        comparison = self._comparator.compare(current_stats, previous_stats)
        return Ok(
            ComparisonReport(
                current=current.ok_value,
                previous=previous.ok_value,
                comparison=comparison,
                insights=comparison_insights(comparison),
            )
        )

    def analyze_tool_usage(
        self, project_path: str = "", timeframe: str = "today"
    ) -> Result[ToolUsageReport, str]:
        fetched = self._fetch(project_path, self.parse_timeframe(timeframe))
        if isinstance(fetched, Err):
            return fetched

        stats = self._aggregator.calculate_from_snapshot(fetched.ok_value.snapshot)
        analysis = self._scorer.analyze_tool_usage(stats.tool_usage, stats.total_time_hours)
        mean_score = (
            sum(t.efficiency_score for t in analysis) / len(analysis) if analysis else 0.0
        )
        return Ok(
            ToolUsageReport(
                tool_analysis=analysis,
                recommendations=tool_usage_recommendations(analysis, stats),
                efficiency_score=round_to(mean_score, 1),
            )
        )

    def analyze_cost(
        self, project_path: str = "", timeframe: str = "today"
    ) -> Result[CostAnalysis, str]:
        fetched = self._fetch(project_path, self.parse_timeframe(timeframe))
        if isinstance(fetched, Err):
            return fetched
        stats = self._aggregator.calculate_from_snapshot(fetched.ok_value.snapshot)
        return Ok(self._scorer.calculate_cost_analysis(stats))

    def check_data_availability(self) -> DataAvailability:
        """Pass through provider availability with an overall status."""
        try:
            availability = self._provider.check_data_source_availability()
        except Exception:
            logger.exception("Data source availability check failed")
            return DataAvailability(
                recommendations=["Data source check failed; verify the data provider setup"]
            )

        if availability.cost_api and availability.opentelemetry:
            status = "excellent"
            recommendations = ["All data sources are available for the most complete analysis"]
        elif availability.cost_api:
            status = "good"
            recommendations = [
                "Cost data is available for basic analysis",
                "Enable OpenTelemetry for more detailed monitoring data",
            ]
        else:
            status = "unavailable"
            recommendations = ["The primary data source is unavailable; check the environment"]

        return DataAvailability(
            cost_api=availability.cost_api,
            opentelemetry=availability.opentelemetry,
            overall_status=status,
            recommendations=recommendations,
        )

    def _fetch(self, project_path: str, window: TimeframeRange) -> Result[UsageBundle, str]:
        try:
            return Ok(self._provider.get_usage(project_path, window))
        except Exception as exc:
            logger.warning("Failed to fetch usage for %s: %s", project_path or "all projects", exc)
            return Err(f"Failed to fetch usage data: {exc}")

    def _data_quality(self, bundle: UsageBundle, now: datetime) -> DataQuality:
        sources = bundle.sources or [bundle.snapshot.source]
        return DataQuality(
            completeness=clamp(bundle.completeness, 0.0, 1.0),
            reliability=data_reliability(sources),
            freshness=round_to(data_freshness(bundle.last_updated, now), 2),
        )


def _with_basic(request: AnalysisRequest) -> AnalysisRequest:
    if request.analysis_types is None or "basic" in request.analysis_types:
        return request
    return request.model_copy(update={"analysis_types": [*request.analysis_types, "basic"]})
