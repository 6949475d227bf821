"""Rule-based generation of natural-language insights."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import AnalysisContext, InsightCategory, Priority, SmartInsights
from ccstats.services._numeric import active_tool_count

logger = logging.getLogger(__name__)

PRIORITY_RANK: dict[str, int] = {"low": 0, "medium": 1, "high": 2}
CATEGORY_PRECEDENCE: tuple[InsightCategory, ...] = (
    "productivity",
    "efficiency",
    "cost",
    "trends",
    "tools",
)


@dataclass(frozen=True)
class InsightRule:
    """One condition/action rule evaluated against an AnalysisContext."""

    id: str
    name: str
    category: InsightCategory
    priority: Priority
    condition: Callable[[AnalysisContext], bool]
    generate: Callable[[AnalysisContext], str]
    recommend: Callable[[AnalysisContext], str] | None = None
    enabled: bool = True


def _score(ctx: AnalysisContext) -> float | None:
    return ctx.efficiency.productivity_score if ctx.efficiency else None


def _tokens_per_hour(ctx: AnalysisContext) -> float | None:
    return ctx.efficiency.tokens_per_hour if ctx.efficiency else None


def _cost_per_hour(ctx: AnalysisContext) -> float | None:
    return ctx.efficiency.cost_per_hour if ctx.efficiency else None


def _productivity_trend(ctx: AnalysisContext) -> float:
    return ctx.trends.productivity_trend if ctx.trends else 0.0


def _tool_count(ctx: AnalysisContext) -> int:
    return active_tool_count(ctx.basic_stats.tool_usage)


def _hours(ctx: AnalysisContext) -> float:
    return ctx.basic_stats.total_time_hours


def _at_least(value: float | None, threshold: float) -> bool:
    return value is not None and value >= threshold


def _above(value: float | None, threshold: float) -> bool:
    return value is not None and value > threshold


def _below(value: float | None, threshold: float) -> bool:
    return value is not None and value < threshold


def _most_used_tool(ctx: AnalysisContext) -> str:
    tool, count = max(ctx.basic_stats.tool_usage.items(), key=lambda item: item[1])
    return f"Most used tool: {tool} ({count} uses)"


def default_rules() -> list[InsightRule]:
    """A fresh copy of the built-in rule set."""
    return [
        InsightRule(
            id="high_productivity",
            name="High productivity",
            category="productivity",
            priority="medium",
            condition=lambda ctx: _at_least(_score(ctx), 8),
            generate=lambda ctx: f"Productivity is high today with a score of {_score(ctx):.1f}",
            recommend=lambda ctx: "Keep up this pace and note what made today's work effective",
        ),
        InsightRule(
            id="low_productivity",
            name="Low productivity",
            category="productivity",
            priority="high",
            condition=lambda ctx: _below(_score(ctx), 4),
            generate=lambda ctx: (
                f"Productivity score of {_score(ctx):.1f} is low; the way of working may need "
                "adjusting"
            ),
            recommend=lambda ctx: (
                "Check for frequent interruptions or overly large tasks; try time-boxed focus "
                "blocks"
            ),
        ),
        InsightRule(
            id="high_token_usage",
            name="High token usage",
            category="efficiency",
            priority="medium",
            condition=lambda ctx: _above(_tokens_per_hour(ctx), 1500),
            generate=lambda ctx: f"Token usage is high ({_tokens_per_hour(ctx):.0f}/hour)",
            recommend=lambda ctx: "Use more precise prompts to cut token usage and cost",
        ),
        InsightRule(
            id="low_token_usage",
            name="Low token usage",
            category="efficiency",
            priority="low",
            condition=lambda ctx: _below(_tokens_per_hour(ctx), 300),
            generate=lambda ctx: f"Token usage is low ({_tokens_per_hour(ctx):.0f}/hour)",
            recommend=lambda ctx: "There may be room to lean on the assistant for more of the work",
        ),
        InsightRule(
            id="high_cost_per_hour",
            name="High hourly cost",
            category="cost",
            priority="high",
            condition=lambda ctx: _above(_cost_per_hour(ctx), 20),
            generate=lambda ctx: f"Hourly cost is high (${_cost_per_hour(ctx):.2f})",
            recommend=lambda ctx: "Give precise instructions to avoid long, repeated exchanges",
        ),
        InsightRule(
            id="cost_efficient",
            name="Cost efficient",
            category="cost",
            priority="low",
            condition=lambda ctx: _below(_cost_per_hour(ctx), 5),
            generate=lambda ctx: (
                f"Costs are well controlled at only ${_cost_per_hour(ctx):.2f} per hour"
            ),
        ),
        InsightRule(
            id="diverse_tool_usage",
            name="Diverse tool usage",
            category="tools",
            priority="medium",
            condition=lambda ctx: _tool_count(ctx) >= 5,
            generate=lambda ctx: (
                f"Used {_tool_count(ctx)} different tools, showing a varied way of working"
            ),
        ),
        InsightRule(
            id="limited_tool_usage",
            name="Limited tool usage",
            category="tools",
            priority="medium",
            condition=lambda ctx: _tool_count(ctx) <= 2,
            generate=lambda ctx: f"Mostly used {_tool_count(ctx)} tools",
            recommend=lambda ctx: "Try more tools such as Task or MultiEdit to work faster",
        ),
        InsightRule(
            id="most_used_tool",
            name="Most used tool",
            category="tools",
            priority="low",
            condition=lambda ctx: _tool_count(ctx) > 0,
            generate=_most_used_tool,
        ),
        InsightRule(
            id="long_session",
            name="Long working time",
            category="productivity",
            priority="medium",
            condition=lambda ctx: _hours(ctx) > 6,
            generate=lambda ctx: f"Worked {_hours(ctx):.1f} hours, a long stretch",
            recommend=lambda ctx: "Take a 15 minute break every 2 hours to stay effective",
        ),
        InsightRule(
            id="efficient_session",
            name="Efficient session",
            category="productivity",
            priority="low",
            condition=lambda ctx: 0 < _hours(ctx) < 4 and _above(_score(ctx), 6),
            generate=lambda ctx: f"Achieved strong results in {_hours(ctx):.1f} hours",
            recommend=lambda ctx: "This was an efficient stretch; note the rhythm that worked",
        ),
        InsightRule(
            id="productivity_improving",
            name="Productivity improving",
            category="trends",
            priority="medium",
            condition=lambda ctx: _productivity_trend(ctx) > 10,
            generate=lambda ctx: f"Productivity is trending up by {_productivity_trend(ctx):.1f}%",
            recommend=lambda ctx: "Keep the improvement going and identify what is driving it",
        ),
        InsightRule(
            id="productivity_declining",
            name="Productivity declining",
            category="trends",
            priority="high",
            condition=lambda ctx: _productivity_trend(ctx) < -15,
            generate=lambda ctx: (
                f"Productivity is trending down by {abs(_productivity_trend(ctx)):.1f}%"
            ),
            recommend=lambda ctx: "Check whether your workflow or environment changed recently",
        ),
        InsightRule(
            id="high_file_activity",
            name="High file activity",
            category="productivity",
            priority="low",
            condition=lambda ctx: ctx.basic_stats.files_modified_count > 10,
            generate=lambda ctx: (
                f"Modified {ctx.basic_stats.files_modified_count} files, a very active project"
            ),
        ),
        InsightRule(
            id="focused_work",
            name="Focused work",
            category="productivity",
            priority="low",
            condition=lambda ctx: (
                ctx.basic_stats.files_modified_count <= 3 and _above(_score(ctx), 6)
            ),
            generate=lambda ctx: "Did focused, in-depth work on a small number of files",
            recommend=lambda ctx: "Focused work like this supports careful, high quality output",
        ),
    ]


class InsightRuleEngine:
    """Evaluates a registry of insight rules against an analysis context.

    The registry is owned by this instance. Mutations (add, remove, toggle)
    take a lock so there is a single writer at a time, and evaluation iterates
    a snapshot taken under the same lock. Independent analyses running in
    parallel should each use their own engine.
    """

    def __init__(
        self,
        rules: Iterable[InsightRule] | None = None,
        config: AnalyticsConfig | None = None,
    ) -> None:
        self._config = config or AnalyticsConfig()
        self._lock = threading.Lock()
        self._rules: dict[str, InsightRule] = {}
        for rule in default_rules() if rules is None else rules:
            self._rules[rule.id] = rule
        logger.debug("Initialized %d insight rules", len(self._rules))

    def add_rule(self, rule: InsightRule, *, replace_existing: bool = False) -> bool:
        """Register a rule; an existing id is only overwritten when asked to."""
        if rule.priority not in PRIORITY_RANK:
            logger.warning("Insight rule %s has unknown priority %r", rule.id, rule.priority)
            return False
        with self._lock:
            if rule.id in self._rules and not replace_existing:
                logger.warning("Insight rule %s already exists", rule.id)
                return False
            self._rules[rule.id] = rule
        logger.debug("Added insight rule %s", rule.id)
        return True

    def remove_rule(self, rule_id: str) -> bool:
        with self._lock:
            removed = self._rules.pop(rule_id, None) is not None
        logger.debug("Remove insight rule %s: %s", rule_id, removed)
        return removed

    def toggle_rule(self, rule_id: str, enabled: bool) -> bool:
        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                return False
            self._rules[rule_id] = replace(rule, enabled=enabled)
        logger.debug("Insight rule %s %s", rule_id, "enabled" if enabled else "disabled")
        return True

    def get_rules(self) -> list[InsightRule]:
        with self._lock:
            return list(self._rules.values())

    def generate_insights(self, context: AnalysisContext) -> SmartInsights:
        """Run every enabled rule; failing rules are logged and skipped."""
        try:
            insights: list[str] = []
            recommendations: list[str] = []
            priority: Priority = "low"
            categories: set[str] = set()

            for rule in self.get_rules():
                if not rule.enabled:
                    continue
                try:
                    rank = PRIORITY_RANK[rule.priority]
                    if not rule.condition(context):
                        continue
                    insight = rule.generate(context)
                    if not isinstance(insight, str) or not insight.strip():
                        continue
                    recommendation = rule.recommend(context) if rule.recommend else ""
                except Exception:
                    logger.warning("Insight rule %s failed", rule.id, exc_info=True)
                    continue

                insights.append(insight)
                categories.add(rule.category)
                if rank > PRIORITY_RANK[priority]:
                    priority = rule.priority
                if isinstance(recommendation, str) and recommendation.strip():
                    recommendations.append(recommendation)

            limit = self._config.max_insights
            result = SmartInsights(
                insights=insights[:limit],
                recommendations=recommendations[:limit],
                priority=priority,
                category=primary_category(categories),
            )
        except Exception:
            logger.exception("Insight generation failed")
            return SmartInsights(insights=["Insights are temporarily unavailable"])

        logger.debug(
            "Generated %d insights and %d recommendations (priority=%s, category=%s)",
            len(result.insights),
            len(result.recommendations),
            result.priority,
            result.category,
        )
        return result


def primary_category(categories: Iterable[str]) -> InsightCategory:
    """First triggered category in precedence order, defaulting to productivity."""
    triggered = set(categories)
    for category in CATEGORY_PRECEDENCE:
        if category in triggered:
            return category
    return "productivity"
