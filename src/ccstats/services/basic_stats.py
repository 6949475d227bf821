"""Aggregation of raw usage snapshots into BasicStats, plus comparison."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from pydantic import ValidationError

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import BasicStats, StatsComparison, StatsValidation
from ccstats.models.usage import UsageSnapshot
from ccstats.services._numeric import (
    non_negative,
    non_negative_int,
    percent_change,
    round_to,
    safe_div,
)

logger = logging.getLogger(__name__)

HOURS_TOLERANCE = 0.01


def empty_stats() -> BasicStats:
    """The canonical all-zero BasicStats record."""
    return BasicStats()


def hours_from_seconds(seconds: float) -> float:
    return round_to(seconds / 3600, 2)


def _clean_tool_usage(tool_usage: Mapping[str, int]) -> dict[str, int]:
    return {
        str(tool): non_negative_int(count)
        for tool, count in tool_usage.items()
        if tool and non_negative_int(count) > 0
    }


def _add_counts(target: dict[str, int], source: Mapping[str, int]) -> None:
    for key, count in source.items():
        target[key] = target.get(key, 0) + non_negative_int(count)


class BasicStatsAggregator:
    """Builds canonical BasicStats records from raw snapshots.

    Every entry point is fail-safe: an unexpected fault is logged and the
    canonical empty record is returned instead of raising.
    """

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        self._config = config or AnalyticsConfig()

    def calculate_from_snapshot(self, snapshot: UsageSnapshot) -> BasicStats:
        """Map one snapshot onto BasicStats, clamping negative inputs to zero."""
        try:
            minutes = non_negative(snapshot.duration_minutes)
            tokens = non_negative_int(snapshot.tokens.effective_total)
            model = snapshot.model or self._config.default_model
            stats = BasicStats(
                session_count=max(1, non_negative_int(snapshot.session_count)),
                total_time_seconds=minutes * 60,
                total_time_hours=round_to(minutes / 60, 2),
                total_tokens=tokens,
                total_cost_usd=round_to(non_negative(snapshot.costs.total), 4),
                files_modified_count=non_negative_int(snapshot.files_modified_count),
                files_modified=list(snapshot.files_modified),
                tool_usage=_clean_tool_usage(snapshot.tool_usage),
                model_usage={model: tokens} if tokens > 0 else {},
            )
        except Exception:
            logger.exception("Failed to calculate stats from snapshot")
            return empty_stats()
        logger.debug("Calculated basic stats: %s", stats)
        return stats

    def calculate_from_snapshots(self, entries: Sequence[object]) -> BasicStats:
        """Aggregate a list of snapshots, skipping null or malformed entries.

        Sessions are counted as distinct ``(timestamp, project)`` pairs, an
        approximation that undercounts distinct sessions sharing both values.
        """
        if not entries:
            logger.warning("Usage list is empty, returning empty stats")
            return empty_stats()

        try:
            snapshots = list(self._valid_snapshots(entries))
            if not snapshots:
                logger.warning("No valid usage entries, returning empty stats")
                return empty_stats()

            total_tokens = 0
            total_cost = 0.0
            total_minutes = 0.0
            sessions: set[tuple[str, str]] = set()
            tool_usage: dict[str, int] = {}
            model_usage: dict[str, int] = {}
            files: dict[str, None] = {}

            for snapshot in snapshots:
                tokens = non_negative_int(snapshot.tokens.effective_total)
                total_tokens += tokens
                total_cost += non_negative(snapshot.costs.total)
                total_minutes += non_negative(snapshot.duration_minutes)
                sessions.add((snapshot.timestamp, snapshot.project or "unknown"))
                _add_counts(tool_usage, _clean_tool_usage(snapshot.tool_usage))
                if tokens > 0:
                    model = snapshot.model or self._config.default_model
                    model_usage[model] = model_usage.get(model, 0) + tokens
                files.update(dict.fromkeys(snapshot.files_modified))

            stats = BasicStats(
                session_count=len(sessions),
                total_time_seconds=total_minutes * 60,
                total_time_hours=round_to(total_minutes / 60, 2),
                total_tokens=total_tokens,
                total_cost_usd=round_to(total_cost, 4),
                files_modified_count=len(files),
                files_modified=list(files),
                tool_usage=tool_usage,
                model_usage=model_usage,
            )
        except Exception:
            logger.exception("Failed to aggregate %d usage entries", len(entries))
            return empty_stats()
        logger.debug("Aggregated %d snapshots into %s", len(snapshots), stats)
        return stats

    def merge(self, stats_list: Sequence[BasicStats]) -> BasicStats:
        """Sum several BasicStats, recomputing hours from the summed seconds."""
        if not stats_list:
            return empty_stats()
        if len(stats_list) == 1:
            return stats_list[0].model_copy(deep=True)

        try:
            merged = BasicStats()
            files: dict[str, None] = {}
            for stats in stats_list:
                merged.session_count += stats.session_count
                merged.total_time_seconds += stats.total_time_seconds
                merged.total_tokens += stats.total_tokens
                merged.total_cost_usd += stats.total_cost_usd
                merged.files_modified_count += stats.files_modified_count
                files.update(dict.fromkeys(stats.files_modified))
                _add_counts(merged.tool_usage, stats.tool_usage)
                _add_counts(merged.model_usage, stats.model_usage)

            merged.total_time_hours = hours_from_seconds(merged.total_time_seconds)
            merged.total_cost_usd = round_to(merged.total_cost_usd, 4)
            merged.files_modified = list(files)
        except Exception:
            logger.exception("Failed to merge %d stats records", len(stats_list))
            return empty_stats()
        return merged

    def validate_and_correct(self, stats: BasicStats) -> StatsValidation:
        """Check BasicStats invariants, correcting and reporting each violation."""
        issues: list[str] = []
        corrected = stats.model_copy(deep=True)

        if corrected.total_time_seconds < 0:
            issues.append("Total time cannot be negative")
            corrected.total_time_seconds = 0.0
            corrected.total_time_hours = 0.0

        if abs(corrected.total_time_hours - corrected.total_time_seconds / 3600) > HOURS_TOLERANCE:
            issues.append("Time in hours does not match time in seconds")
            corrected.total_time_hours = hours_from_seconds(corrected.total_time_seconds)

        if corrected.total_tokens < 0:
            issues.append("Token count cannot be negative")
            corrected.total_tokens = 0

        if corrected.total_cost_usd < 0:
            issues.append("Cost cannot be negative")
            corrected.total_cost_usd = 0.0

        if corrected.files_modified_count != len(corrected.files_modified):
            issues.append("Modified file count does not match the modified file list")
            corrected.files_modified_count = len(corrected.files_modified)

        if corrected.session_count <= 0:
            issues.append("Session count must be at least 1")
            corrected.session_count = 1

        negative_tools = [tool for tool, count in corrected.tool_usage.items() if count < 0]
        if negative_tools:
            issues.append(f"Negative tool usage counts: {', '.join(sorted(negative_tools))}")
            corrected.tool_usage = {
                tool: max(0, count) for tool, count in corrected.tool_usage.items()
            }

        if issues:
            logger.warning("Corrected %d stats issues: %s", len(issues), "; ".join(issues))
        return StatsValidation(valid=not issues, corrected=corrected, issues=issues)

    def _valid_snapshots(self, entries: Iterable[object]) -> Iterable[UsageSnapshot]:
        for entry in entries:
            if isinstance(entry, UsageSnapshot):
                yield entry
            elif isinstance(entry, Mapping):
                try:
                    yield UsageSnapshot.model_validate(entry)
                except ValidationError as exc:
                    logger.warning("Skipping malformed usage entry: %s", exc.errors()[:1])


class StatsComparator:
    """Percentage deltas between two BasicStats records."""

    def compare(self, current: BasicStats, previous: BasicStats) -> StatsComparison:
        current_rate = safe_div(current.total_tokens, current.total_time_hours)
        previous_rate = safe_div(previous.total_tokens, previous.total_time_hours)
        return StatsComparison(
            time_change=percent_change(current.total_time_hours, previous.total_time_hours),
            tokens_change=percent_change(current.total_tokens, previous.total_tokens),
            cost_change=percent_change(current.total_cost_usd, previous.total_cost_usd),
            files_change=percent_change(
                current.files_modified_count, previous.files_modified_count
            ),
            sessions_change=percent_change(current.session_count, previous.session_count),
            efficiency_change=percent_change(current_rate, previous_rate),
        )
