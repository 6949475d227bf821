"""Heuristic estimate of changed lines from tool invocation counts."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ccstats.config import AnalyticsConfig
from ccstats.services._numeric import active_tool_count, clamp, non_negative_int

logger = logging.getLogger(__name__)

MIN_CORRECTION = 0.5
MAX_CORRECTION = 2.0


class CodeVolumeEstimator:
    """Estimates lines of code changed from a tool-usage mapping.

    Each tool contributes ``lines_per_use * count`` to a raw estimate, which is
    then scaled by a correction factor rewarding tool diversity and a high share
    of content-producing tools, and discounting very high invocation volumes.
    """

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        config = config or AnalyticsConfig()
        self._model: dict[str, int] = dict(config.line_estimation_model)
        self._default_lines = config.default_lines_per_use
        self._edit_tools = frozenset(config.edit_tools)

    def lines_per_use(self, tool: str) -> int:
        return self._model.get(tool, self._default_lines)

    def raw_estimate(self, tool_usage: Mapping[str, int]) -> int:
        """Sum of per-tool weights times counts, before correction."""
        return sum(
            self.lines_per_use(tool) * non_negative_int(count)
            for tool, count in tool_usage.items()
        )

    def correction_factor(self, tool_usage: Mapping[str, int]) -> float:
        """Combined diversity, frequency and edit-ratio factor in [0.5, 2.0]."""
        counts = {tool: non_negative_int(count) for tool, count in tool_usage.items()}
        distinct = active_tool_count(counts)
        total = sum(counts.values())

        diversity = min(1.3, 1 + (distinct - 1) * 0.05)
        frequency = 0.9 if total > 20 else 1.0
        edit_usage = sum(count for tool, count in counts.items() if tool in self._edit_tools)
        edit_ratio = edit_usage / total if total > 0 else 0.0
        edit = 0.8 + edit_ratio * 0.4

        factor = diversity * frequency * edit
        logger.debug(
            "Correction factor: diversity=%.3f frequency=%.2f edit=%.3f -> %.3f",
            diversity,
            frequency,
            edit,
            factor,
        )
        return clamp(factor, MIN_CORRECTION, MAX_CORRECTION)

    def estimate_lines_changed(self, tool_usage: Mapping[str, int]) -> int:
        """Return the corrected, rounded line estimate (never negative)."""
        raw = self.raw_estimate(tool_usage)
        if raw <= 0:
            return 0
        estimate = int(raw * self.correction_factor(tool_usage) + 0.5)
        logger.debug("Estimated %d changed lines (raw %d)", estimate, raw)
        return estimate

    def update_model(self, overrides: Mapping[str, int]) -> None:
        """Override lines-per-use weights for this estimator instance."""
        logger.info("Updating line estimation model: %s", dict(overrides))
        for tool, weight in overrides.items():
            self._model[tool] = non_negative_int(weight)

    def get_model(self) -> dict[str, int]:
        return dict(self._model)
