"""Tests for the insight rule engine."""

from __future__ import annotations

import pytest
from conftest import make_stats

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import AnalysisContext, EfficiencyMetrics, TrendAnalysis
from ccstats.services.insights import (
    InsightRule,
    InsightRuleEngine,
    default_rules,
    primary_category,
)


def _rule(rule_id: str, **overrides: object) -> InsightRule:
    fields: dict[str, object] = {
        "id": rule_id,
        "name": rule_id,
        "category": "tools",
        "priority": "low",
        "condition": lambda ctx: True,
        "generate": lambda ctx: f"{rule_id} fired",
    }
    fields.update(overrides)
    return InsightRule(**fields)  # type: ignore[arg-type]


def _context(score: float | None = None, **stats_kwargs: object) -> AnalysisContext:
    efficiency = None
    if score is not None:
        efficiency = EfficiencyMetrics(
            productivity_score=score,
            tokens_per_hour=800,
            cost_per_hour=10,
            efficiency_rating="good",
        )
    return AnalysisContext(basic_stats=make_stats(**stats_kwargs), efficiency=efficiency)


class TestRegistry:
    def test_default_rule_ids_are_unique(self) -> None:
        ids = [rule.id for rule in default_rules()]
        assert len(ids) == len(set(ids)) == 15

    def test_add_rule_rejects_duplicate(self) -> None:
        engine = InsightRuleEngine(rules=[])
        assert engine.add_rule(_rule("a"))
        assert not engine.add_rule(_rule("a", name="other"))
        assert engine.get_rules()[0].name == "a"

    def test_add_rule_can_replace(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("a")])
        assert engine.add_rule(_rule("a", name="other"), replace_existing=True)
        assert [r.name for r in engine.get_rules()] == ["other"]

    def test_remove_rule(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("a")])
        assert engine.remove_rule("a")
        assert not engine.remove_rule("a")
        assert engine.get_rules() == []

    def test_toggle_rule(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("a")])
        assert engine.toggle_rule("a", False)
        assert not engine.get_rules()[0].enabled
        assert engine.generate_insights(_context()).insights == []
        assert not engine.toggle_rule("missing", True)

    def test_engines_do_not_share_registries(self) -> None:
        first = InsightRuleEngine()
        second = InsightRuleEngine()
        first.remove_rule("most_used_tool")
        assert any(rule.id == "most_used_tool" for rule in second.get_rules())


class TestGenerateInsights:
    def test_failing_rule_is_skipped(self) -> None:
        def explode(ctx: AnalysisContext) -> bool:
            raise ZeroDivisionError

        engine = InsightRuleEngine(rules=[_rule("bad", condition=explode), _rule("good")])
        result = engine.generate_insights(_context())
        assert result.insights == ["good fired"]

    def test_blank_insights_are_dropped(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("blank", generate=lambda ctx: "  ")])
        assert engine.generate_insights(_context()).insights == []

    def test_insights_capped(self) -> None:
        engine = InsightRuleEngine(
            rules=[_rule(f"r{i}", recommend=lambda ctx: "do it") for i in range(12)],
            config=AnalyticsConfig(max_insights=8),
        )
        result = engine.generate_insights(_context())
        assert len(result.insights) == 8
        assert len(result.recommendations) == 8

    def test_highest_priority_wins(self) -> None:
        engine = InsightRuleEngine(
            rules=[_rule("a", priority="medium"), _rule("b", priority="high"), _rule("c")]
        )
        assert engine.generate_insights(_context()).priority == "high"

    def test_nothing_fired_defaults(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("never", condition=lambda ctx: False)])
        result = engine.generate_insights(_context())
        assert result.insights == []
        assert result.priority == "low"
        assert result.category == "productivity"

    def test_low_productivity_rules(self) -> None:
        result = InsightRuleEngine().generate_insights(_context(score=3.2))
        assert result.priority == "high"
        assert any("3.2" in insight for insight in result.insights)
        assert result.category == "productivity"

    def test_efficiency_rules_need_efficiency(self) -> None:
        result = InsightRuleEngine().generate_insights(_context(score=None))
        assert not any("Productivity" in insight for insight in result.insights)
        assert "Most used tool: Edit (10 uses)" in result.insights

    def test_declining_trend_rule(self) -> None:
        context = AnalysisContext(
            basic_stats=make_stats(),
            trends=TrendAnalysis(productivity_trend=-20),
        )
        result = InsightRuleEngine().generate_insights(context)
        assert "Productivity is trending down by 20.0%" in result.insights
        assert result.priority == "high"


@pytest.mark.parametrize(
    ("categories", "expected"),
    [
        ({"tools", "cost"}, "cost"),
        ({"trends", "efficiency"}, "efficiency"),
        ({"tools"}, "tools"),
        ({"productivity", "cost"}, "productivity"),
        (set(), "productivity"),
    ],
)
def test_primary_category(categories: set[str], expected: str) -> None:
    assert primary_category(categories) == expected


class TestRuleFaultIsolation:
    def test_failing_generate_is_skipped(self) -> None:
        def explode(ctx: AnalysisContext) -> str:
            raise KeyError("missing")

        engine = InsightRuleEngine(rules=[_rule("bad", generate=explode), _rule("good")])
        assert engine.generate_insights(_context()).insights == ["good fired"]

    def test_failing_recommend_drops_whole_rule(self) -> None:
        def explode(ctx: AnalysisContext) -> str:
            raise ValueError("no advice")

        engine = InsightRuleEngine(
            rules=[_rule("bad", recommend=explode), _rule("good", recommend=lambda ctx: "ok")]
        )
        result = engine.generate_insights(_context())
        assert result.insights == ["good fired"]
        assert result.recommendations == ["ok"]

    def test_non_string_recommendation_is_ignored(self) -> None:
        engine = InsightRuleEngine(
            rules=[
                _rule("first"),
                _rule("silent", recommend=lambda ctx: None),
                _rule("after", recommend=lambda ctx: "keep going"),
            ]
        )
        result = engine.generate_insights(_context())
        assert result.insights == ["first fired", "silent fired", "after fired"]
        assert result.recommendations == ["keep going"]

    def test_non_string_insight_is_ignored(self) -> None:
        engine = InsightRuleEngine(rules=[_rule("none", generate=lambda ctx: None), _rule("ok")])
        assert engine.generate_insights(_context()).insights == ["ok fired"]

    def test_unknown_priority_does_not_abort_other_rules(self) -> None:
        engine = InsightRuleEngine(
            rules=[_rule("good", priority="medium"), _rule("odd", priority="urgent"), _rule("last")]
        )
        result = engine.generate_insights(_context())
        assert result.insights == ["good fired", "last fired"]
        assert result.priority == "medium"

    def test_add_rule_rejects_unknown_priority(self) -> None:
        engine = InsightRuleEngine(rules=[])
        assert not engine.add_rule(_rule("odd", priority="urgent"))
        assert engine.get_rules() == []


class TestToolCounting:
    def test_zero_count_tools_are_not_counted(self) -> None:
        usage = {"Edit": 1, "Grep": 0, "Glob": 0, "LS": 0, "Bash": 0, "Task": 0}
        result = InsightRuleEngine().generate_insights(_context(tool_usage=usage))
        assert "Mostly used 1 tools" in result.insights
        assert not any("different tools" in insight for insight in result.insights)

    def test_only_zero_counts_has_no_most_used_tool(self) -> None:
        result = InsightRuleEngine().generate_insights(_context(tool_usage={"Grep": 0}))
        assert not any(insight.startswith("Most used tool") for insight in result.insights)
