"""Protocol definitions for usage data access."""

from __future__ import annotations

from typing import Protocol

from ccstats.models.reports import TimeframeRange
from ccstats.models.usage import DataSourceAvailability, UsageBundle


class UsageDataProvider(Protocol):
    """Supplies raw usage for a project; implemented outside the analytics core."""

    def get_usage(self, project_path: str, timeframe: TimeframeRange) -> UsageBundle: ...

    def check_data_source_availability(self) -> DataSourceAvailability: ...
