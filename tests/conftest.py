"""Shared fixtures for ccstats tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import BasicStats
from ccstats.models.reports import TimeframeRange
from ccstats.models.usage import (
    CostFigures,
    DataSourceAvailability,
    TokenCounts,
    UsageBundle,
    UsageSnapshot,
)
from ccstats.services.basic_stats import BasicStatsAggregator
from ccstats.services.efficiency import EfficiencyScorer

FIXED_NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


class FakeProvider:
    """In-memory UsageDataProvider that records the windows it was asked for."""

    def __init__(
        self,
        bundle: UsageBundle | None = None,
        availability: DataSourceAvailability | None = None,
        error: Exception | None = None,
    ) -> None:
        self.bundle = bundle or UsageBundle()
        self.availability = availability or DataSourceAvailability(cost_api=True)
        self.error = error
        self.calls: list[tuple[str, TimeframeRange]] = []

    def get_usage(self, project_path: str, timeframe: TimeframeRange) -> UsageBundle:
        self.calls.append((project_path, timeframe))
        if self.error is not None:
            raise self.error
        return self.bundle

    def check_data_source_availability(self) -> DataSourceAvailability:
        if self.error is not None:
            raise self.error
        return self.availability


def make_snapshot(
    *,
    tokens: int = 3000,
    cost: float = 1.5,
    minutes: float = 120,
    tool_usage: dict[str, int] | None = None,
    files: list[str] | None = None,
    timestamp: str = "2025-03-12T10:00:00Z",
    project: str = "/work/app",
    model: str = "claude-3-5-sonnet-20241022",
) -> UsageSnapshot:
    files = files if files is not None else ["src/app.py", "src/util.py"]
    return UsageSnapshot(
        timestamp=timestamp,
        project=project,
        tokens=TokenCounts(input=tokens // 3, output=tokens - tokens // 3, total=tokens),
        costs=CostFigures(total=cost),
        duration_minutes=minutes,
        message_count=12,
        session_count=1,
        tool_usage=tool_usage if tool_usage is not None else {"Edit": 10, "Read": 5},
        files_modified_count=len(files),
        files_modified=files,
        model=model,
    )


def make_stats(
    *,
    hours: float = 2.0,
    tokens: int = 3000,
    cost: float = 1.5,
    files: int = 2,
    sessions: int = 1,
    tool_usage: dict[str, int] | None = None,
) -> BasicStats:
    file_list = [f"file_{i}.py" for i in range(files)]
    return BasicStats(
        session_count=sessions,
        total_time_seconds=hours * 3600,
        total_time_hours=hours,
        total_tokens=tokens,
        total_cost_usd=cost,
        files_modified_count=files,
        files_modified=file_list,
        tool_usage=tool_usage if tool_usage is not None else {"Edit": 10, "Read": 5},
        model_usage={"claude-3-5-sonnet-20241022": tokens} if tokens else {},
    )


@pytest.fixture
def config() -> AnalyticsConfig:
    """Default analytics configuration."""
    return AnalyticsConfig()


@pytest.fixture
def aggregator(config: AnalyticsConfig) -> BasicStatsAggregator:
    return BasicStatsAggregator(config)


@pytest.fixture
def scorer(config: AnalyticsConfig) -> EfficiencyScorer:
    return EfficiencyScorer(config=config)


@pytest.fixture
def sample_snapshot() -> UsageSnapshot:
    """Two hours of work with ten edits and five reads."""
    return make_snapshot()


@pytest.fixture
def sample_stats() -> BasicStats:
    return make_stats()


@pytest.fixture
def sample_bundle(sample_snapshot: UsageSnapshot) -> UsageBundle:
    """Today's snapshot plus a week of history, last updated an hour ago."""
    history = [
        make_snapshot(tokens=2000 + i * 400, minutes=90 + i * 10, tool_usage={"Edit": 5 + i})
        for i in range(7)
    ]
    return UsageBundle(
        snapshot=sample_snapshot,
        history=history,
        sources=["cost_api"],
        completeness=0.9,
        last_updated="2025-03-12T14:30:00+00:00",
    )


@pytest.fixture
def fake_provider(sample_bundle: UsageBundle) -> FakeProvider:
    return FakeProvider(sample_bundle)
