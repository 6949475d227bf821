"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ccstats.config import AnalyticsConfig
from ccstats.services.basic_stats import BasicStatsAggregator, StatsComparator
from ccstats.services.code_estimator import CodeVolumeEstimator
from ccstats.services.efficiency import EfficiencyScorer
from ccstats.services.insights import InsightRuleEngine
from ccstats.services.orchestrator import AnalyticsOrchestrator
from ccstats.services.recommendations import RecommendationEngine
from ccstats.services.trends import AdvancedTrendEngine, TrendEngine

if TYPE_CHECKING:
    from ccstats.data.protocols import UsageDataProvider


@dataclass
class AnalyticsContainer:
    """Holds one independent set of analytics components."""

    config: AnalyticsConfig
    estimator: CodeVolumeEstimator
    aggregator: BasicStatsAggregator
    comparator: StatsComparator
    scorer: EfficiencyScorer
    trend_engine: AdvancedTrendEngine
    insight_engine: InsightRuleEngine
    recommendation_engine: RecommendationEngine
    orchestrator: AnalyticsOrchestrator

    @classmethod
    def create(
        cls, provider: UsageDataProvider, config: AnalyticsConfig | None = None
    ) -> AnalyticsContainer:
        """Factory that wires all components around a data provider."""
        config = config or AnalyticsConfig()

        estimator = CodeVolumeEstimator(config)
        aggregator = BasicStatsAggregator(config)
        comparator = StatsComparator()
        scorer = EfficiencyScorer(estimator, config)
        trend_engine = AdvancedTrendEngine(TrendEngine(), config)
        insight_engine = InsightRuleEngine(config=config)
        recommendation_engine = RecommendationEngine(config)

        orchestrator = AnalyticsOrchestrator(
            provider,
            config=config,
            aggregator=aggregator,
            comparator=comparator,
            scorer=scorer,
            trend_engine=trend_engine,
            insight_engine=insight_engine,
            recommendation_engine=recommendation_engine,
        )

        return cls(
            config=config,
            estimator=estimator,
            aggregator=aggregator,
            comparator=comparator,
            scorer=scorer,
            trend_engine=trend_engine,
            insight_engine=insight_engine,
            recommendation_engine=recommendation_engine,
            orchestrator=orchestrator,
        )
