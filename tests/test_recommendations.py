"""Tests for the standalone recommendation engine."""

from __future__ import annotations

import pytest
from conftest import make_stats

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import (
    AnalysisContext,
    CostAnalysis,
    EfficiencyMetrics,
    TrendAnalysis,
)
from ccstats.services.recommendations import (
    RecommendationEngine,
    recommendation_priority,
    tool_recommendations,
)


def _efficiency(
    score: float, lines_per_hour: float = 80, tokens_per_hour: float = 900
) -> EfficiencyMetrics:
    return EfficiencyMetrics(
        productivity_score=score,
        lines_per_hour=lines_per_hour,
        tokens_per_hour=tokens_per_hour,
    )


@pytest.mark.parametrize(
    ("score", "trend", "expected"),
    [
        (3.0, 0.0, "high"),
        (8.0, -20.0, "high"),
        (5.0, 0.0, "medium"),
        (8.0, 12.0, "medium"),
        (8.0, 0.0, "low"),
    ],
)
def test_recommendation_priority(score: float, trend: float, expected: str) -> None:
    trends = TrendAnalysis(productivity_trend=trend)
    assert recommendation_priority(_efficiency(score), trends) == expected


def test_priority_without_trends() -> None:
    assert recommendation_priority(_efficiency(8.0), None) == "low"


def test_low_score_recommendations() -> None:
    engine = RecommendationEngine()
    result = engine.generate_recommendations(make_stats(), _efficiency(3.0, lines_per_hour=10))
    assert result.priority == "high"
    assert any("Pomodoro" in s for s in result.suggestions)
    assert any("MultiEdit" in s for s in result.suggestions)


def test_suggestions_are_unique_and_capped() -> None:
    engine = RecommendationEngine(AnalyticsConfig(max_recommendations=6))
    stats = make_stats(tool_usage={"Read": 40})
    result = engine.generate_recommendations(
        stats,
        _efficiency(2.0, lines_per_hour=5, tokens_per_hour=5000),
        TrendAnalysis(productivity_trend=-30, token_trend=50),
        CostAnalysis(cost_per_hour=30, cost_per_line=1.0),
    )
    assert len(result.suggestions) == 6
    assert len(set(result.suggestions)) == 6


def test_tool_recommendations() -> None:
    suggestions = tool_recommendations(make_stats(tool_usage={"Read": 10, "Edit": 1}))
    assert len(suggestions) == 3

    balanced = tool_recommendations(
        make_stats(tool_usage={"Grep": 1, "Task": 1, "Edit": 5, "Read": 5})
    )
    assert balanced == []


def test_personalized_without_efficiency() -> None:
    engine = RecommendationEngine()
    context = AnalysisContext(basic_stats=make_stats(tool_usage={"Grep": 1, "Task": 2}))
    assert engine.generate_personalized_recommendations(context) == []


def test_high_performer_gets_encouragement() -> None:
    engine = RecommendationEngine()
    result = engine.generate_recommendations(
        make_stats(tool_usage={"Grep": 1, "Task": 1, "Edit": 4}), _efficiency(8.5)
    )
    assert result.priority == "low"
    assert result.suggestions[0].startswith("Keep working this efficiently")
