"""Tests for efficiency scoring, tool analysis and cost analysis."""

from __future__ import annotations

import pytest
from conftest import make_stats

from ccstats.config import AnalyticsConfig, ProductivityWeights
from ccstats.services.basic_stats import empty_stats
from ccstats.services.efficiency import EfficiencyScorer, efficiency_rating


class TestEfficiencyMetrics:
    def test_zero_hours_is_no_data(self, scorer: EfficiencyScorer) -> None:
        metrics = scorer.calculate_efficiency_metrics(empty_stats())
        assert metrics.efficiency_rating == "no data"
        assert metrics.productivity_score == 0
        assert metrics.tokens_per_hour == 0
        assert metrics.estimated_lines_changed == 0

    def test_edit_and_read_example(self, scorer: EfficiencyScorer) -> None:
        metrics = scorer.calculate_efficiency_metrics(make_stats())
        assert metrics.estimated_lines_changed == 168
        assert metrics.lines_per_hour == 84.0
        assert metrics.tokens_per_hour == 1500.0
        assert metrics.cost_per_hour == 0.75
        assert metrics.productivity_score == pytest.approx(8.3)
        assert metrics.efficiency_rating == "excellent"

    def test_rating_matches_reported_score(self, scorer: EfficiencyScorer) -> None:
        metrics = scorer.calculate_efficiency_metrics(
            make_stats(hours=3.0, tokens=500, tool_usage={"Edit": 2})
        )
        assert metrics.efficiency_rating == efficiency_rating(metrics.productivity_score)

    @pytest.mark.parametrize(
        ("tokens", "tool_usage"),
        [
            (0, {}),
            (10_000_000, {"Write": 10_000}),
            (1, {"Read": 1}),
        ],
    )
    def test_score_is_bounded(
        self, scorer: EfficiencyScorer, tokens: int, tool_usage: dict[str, int]
    ) -> None:
        metrics = scorer.calculate_efficiency_metrics(
            make_stats(hours=0.5, tokens=tokens, tool_usage=tool_usage)
        )
        assert 0 <= metrics.productivity_score <= 10

    def test_custom_weights_change_score(self) -> None:
        config = AnalyticsConfig(productivity_weights=ProductivityWeights(token_weight=1.0))
        default = EfficiencyScorer().calculate_efficiency_metrics(make_stats(tokens=100))
        weighted = EfficiencyScorer(config=config).calculate_efficiency_metrics(
            make_stats(tokens=100)
        )
        assert weighted.productivity_score != default.productivity_score


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (10.0, "exceptional"),
        (8.5, "exceptional"),
        (8.4, "excellent"),
        (7.0, "excellent"),
        (5.5, "good"),
        (4.0, "fair"),
        (2.5, "needs improvement"),
        (2.4, "poor"),
        (0.0, "poor"),
    ],
)
def test_efficiency_rating_thresholds(score: float, label: str) -> None:
    assert efficiency_rating(score) == label


class TestToolUsage:
    def test_sorted_by_usage_count(self, scorer: EfficiencyScorer) -> None:
        analysis = scorer.analyze_tool_usage({"Read": 2, "Edit": 10, "Bash": 5}, 2.0)
        assert [a.tool_name for a in analysis] == ["Edit", "Bash", "Read"]

    def test_per_tool_fields(self, scorer: EfficiencyScorer) -> None:
        edit = scorer.analyze_tool_usage({"Edit": 10}, 2.0)[0]
        assert edit.usage_count == 10
        assert edit.usage_rate == 5.0
        assert edit.estimated_lines > 50
        # base 8, many lines (x1.2), heavy rate (x0.9)
        assert edit.efficiency_score == pytest.approx(8.6)

    def test_zero_hours_has_zero_rate(self, scorer: EfficiencyScorer) -> None:
        analysis = scorer.analyze_tool_usage({"Edit": 3}, 0.0)
        assert analysis[0].usage_rate == 0

    def test_scores_never_exceed_ten(self, scorer: EfficiencyScorer) -> None:
        analysis = scorer.analyze_tool_usage({"MultiEdit": 50, "Mystery": 1}, 20.0)
        assert all(0 <= a.efficiency_score <= 10 for a in analysis)


class TestCostAnalysis:
    def test_split_and_rates(self, scorer: EfficiencyScorer) -> None:
        analysis = scorer.calculate_cost_analysis(make_stats(cost=10.0))
        assert analysis.total_cost == 10.0
        assert analysis.cost_per_hour == 5.0
        assert analysis.cost_breakdown.input_cost == 3.0
        assert analysis.cost_breakdown.output_cost == 7.0
        assert analysis.cost_breakdown.model_costs == {"claude-3-5-sonnet-20241022": 10.0}

    def test_zero_lines_gives_zero_cost_per_line(self, scorer: EfficiencyScorer) -> None:
        analysis = scorer.calculate_cost_analysis(make_stats(tool_usage={"Read": 4}))
        assert analysis.cost_per_line == 0

    def test_high_cost_suggestions(self, scorer: EfficiencyScorer) -> None:
        stats = make_stats(hours=1.0, cost=40.0, sessions=12, tool_usage={"Read": 9, "Edit": 1})
        suggestions = scorer.calculate_cost_analysis(stats).optimization_suggestions
        assert len(suggestions) == 4

    def test_model_costs_follow_token_share(self, scorer: EfficiencyScorer) -> None:
        stats = make_stats(cost=4.0).model_copy(update={"model_usage": {"a": 300, "b": 100}})
        costs = scorer.calculate_cost_analysis(stats).cost_breakdown.model_costs
        assert costs == {"a": 3.0, "b": 1.0}


def test_zero_count_tools_do_not_raise_score(scorer: EfficiencyScorer) -> None:
    plain = scorer.calculate_efficiency_metrics(make_stats(tool_usage={"Edit": 10, "Read": 5}))
    padded = scorer.calculate_efficiency_metrics(
        make_stats(tool_usage={"Edit": 10, "Read": 5, "Grep": 0, "Glob": 0})
    )
    assert padded.productivity_score == plain.productivity_score
