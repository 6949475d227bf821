"""Trend detection over ordered BasicStats history."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, timedelta
from typing import Literal, NamedTuple

import numpy as np

from ccstats.config import AnalyticsConfig
from ccstats.models.analytics import (
    AnomalyCounts,
    AnomalyReport,
    BasicStats,
    DailyMetric,
    SeasonalityAnalysis,
    TimeSeriesPoint,
    TrendAnalysis,
    TrendResult,
)
from ccstats.services._numeric import clamp, round_to, safe_div

logger = logging.getLogger(__name__)

Metric = Literal["productivity", "tokens", "time"]

STABLE_THRESHOLD = 5.0
STRONG_THRESHOLD = 25.0
MODERATE_THRESHOLD = 10.0
FULL_CONFIDENCE_POINTS = 7

MIN_ADVANCED_POINTS = 5
MIN_ANOMALY_POINTS = 5
MIN_SEASONALITY_DAYS = 14
SEASONALITY_VARIANCE = 0.5

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_METRIC_LABELS: dict[str, str] = {
    "productivity": "Productivity",
    "tokens": "Token usage",
    "time": "Time invested",
}


class LinearFit(NamedTuple):
    slope: float
    intercept: float
    r2: float


def proxy_productivity_score(stats: BasicStats) -> float:
    """Cheap per-point score used only to shape daily trends.

    Token throughput and file output each contribute up to 5 points. This is
    a different metric from EfficiencyScorer's productivity score.
    """
    hours = stats.total_time_hours
    if hours <= 0:
        return 0.0
    token_score = min(5.0, stats.total_tokens / hours / 200)
    files_score = min(5.0, stats.files_modified_count / hours * 5)
    return token_score + files_score


def linear_fit(values: Sequence[float]) -> LinearFit:
    """Ordinary least-squares line over x = 0..n-1 with its R²."""
    y = np.asarray(values, dtype=float)
    x = np.arange(len(y), dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    ss_total = float(np.sum((y - y.mean()) ** 2))
    ss_res = float(np.sum((y - (slope * x + intercept)) ** 2))
    r2 = 1 - ss_res / ss_total if ss_total > 0 else 0.0
    return LinearFit(float(slope), float(intercept), r2)


def trend_consistency(values: Sequence[float]) -> float:
    """Share of consecutive changes that keep the same sign."""
    if len(values) < 3:
        return 0.5
    signs = np.sign(np.diff(np.asarray(values, dtype=float)))
    return float(np.mean(signs[1:] == signs[:-1]))


def first_to_last_change(values: Sequence[float]) -> float:
    if len(values) < 2 or values[0] == 0:
        return 0.0
    return (values[-1] - values[0]) / values[0] * 100


class TrendEngine:
    """Per-day rollups and first-vs-last trend descriptors."""

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def analyze_trends(
        self, history: Sequence[BasicStats], timeframe: str = "week"
    ) -> TrendAnalysis:
        """Analyze an oldest-to-newest series of stats.

        Fewer than two points produce an "insufficient data" result rather than
        an error.
        """
        logger.debug("Analyzing %s trends over %d points", timeframe, len(history))
        if len(history) < 2:
            return _insufficient_result(timeframe)

        try:
            daily = self.aggregate_daily_metrics(history)
            dates = sorted(daily)
            details = {
                "productivity": self.calculate_trend(
                    [daily[d].productivity_score for d in dates], "productivity"
                ),
                "tokens": self.calculate_trend([daily[d].tokens for d in dates], "tokens"),
                "time": self.calculate_trend([daily[d].time_hours for d in dates], "time"),
            }
        except Exception:
            logger.exception("Trend analysis failed")
            return TrendAnalysis(message=f"An error occurred during {timeframe} trend analysis")

        return TrendAnalysis(
            productivity_trend=details["productivity"].change_rate,
            token_trend=details["tokens"].change_rate,
            time_trend=details["time"].change_rate,
            daily_metrics=daily,
            trend_details=details,
        )

    def aggregate_daily_metrics(self, history: Sequence[BasicStats]) -> dict[str, DailyMetric]:
        """Assign synthetic dates and fold same-day points into DailyMetrics."""
        buckets: dict[str, list[BasicStats]] = {}
        for index, stats in enumerate(history):
            if not isinstance(stats, BasicStats):
                continue
            buckets.setdefault(self.synthetic_date(index, len(history)), []).append(stats)

        daily: dict[str, DailyMetric] = {}
        for day, points in buckets.items():
            scores = [proxy_productivity_score(p) for p in points]
            daily[day] = DailyMetric(
                tokens=sum(p.total_tokens for p in points),
                time_hours=sum(p.total_time_hours for p in points),
                productivity_score=sum(scores) / len(scores),
                cost=sum(p.total_cost_usd for p in points),
                files_count=max(p.files_modified_count for p in points),
            )
        return daily

    def synthetic_date(self, index: int, total: int) -> str:
        """Date for the index-th of ``total`` points, the last one being today."""
        return (self._today() - timedelta(days=total - index - 1)).isoformat()

    def calculate_trend(self, values: Sequence[float], metric: str) -> TrendResult:
        label = _METRIC_LABELS.get(metric, metric)
        if len(values) < 2:
            return TrendResult(description=f"Not enough {label.lower()} data to compute a trend")

        change = first_to_last_change(values)
        magnitude = abs(change)
        if magnitude < STABLE_THRESHOLD:
            direction = "stable"
        elif change > 0:
            direction = "up"
        else:
            direction = "down"

        if magnitude > STRONG_THRESHOLD:
            strength = "strong"
        elif magnitude > MODERATE_THRESHOLD:
            strength = "moderate"
        else:
            strength = "weak"

        fit = linear_fit(values)
        confidence = clamp(
            max(0.0, fit.r2)
            * 100
            * min(1.0, len(values) / FULL_CONFIDENCE_POINTS)
            * trend_consistency(values),
            0.0,
            100.0,
        )

        if direction == "stable":
            description = f"{label} remained relatively stable"
        else:
            word = "upward" if direction == "up" else "downward"
            description = f"{label} shows a {strength} {word} trend of about {magnitude:.1f}%"

        return TrendResult(
            direction=direction,
            strength=strength,
            change_rate=round_to(change, 1),
            confidence=round_to(confidence, 2),
            description=description,
        )


class AdvancedTrendEngine:
    """Adds anomaly detection, smoothing and weekday seasonality to TrendEngine.

    The advanced path never aborts an analysis: with too few points, or on any
    internal fault, it returns the basic result with an explanatory message.
    """

    def __init__(
        self,
        basic: TrendEngine | None = None,
        config: AnalyticsConfig | None = None,
    ) -> None:
        self._basic = basic or TrendEngine()
        self._config = config or AnalyticsConfig()

    def analyze_trends(
        self, history: Sequence[BasicStats], timeframe: str = "week"
    ) -> TrendAnalysis:
        basic = self._basic.analyze_trends(history, timeframe)
        if len(history) < MIN_ADVANCED_POINTS:
            return basic.model_copy(
                update={"message": f"Not enough {timeframe} data, degraded to basic analysis"}
            )

        try:
            series = {
                metric: self.time_series(history, metric)
                for metric in ("productivity", "tokens", "time")
            }
            reports = {metric: self.detect_anomalies(points) for metric, points in series.items()}
            smoothed = {
                metric: self.moving_average([p.value for p in points])
                for metric, points in series.items()
            }
            counts = AnomalyCounts(
                productivity=len(reports["productivity"].anomalies),
                tokens=len(reports["tokens"].anomalies),
                time=len(reports["time"].anomalies),
            )
            seasonality = self.analyze_seasonality(basic.daily_metrics)
            analysis = basic.model_copy(
                update={
                    "productivity_trend": round_to(
                        first_to_last_change(smoothed["productivity"]), 1
                    ),
                    "token_trend": round_to(first_to_last_change(smoothed["tokens"]), 1),
                    "time_trend": round_to(first_to_last_change(smoothed["time"]), 1),
                    "anomalies": counts,
                    "seasonality": seasonality if seasonality.has_pattern else None,
                    "confidence_score": self.overall_confidence(counts, len(history)),
                }
            )
        except Exception:
            logger.exception("Advanced trend analysis failed, falling back to basic analysis")
            message = f"Advanced {timeframe} analysis failed, degraded to basic analysis"
            return basic.model_copy(update={"message": message})

        logger.debug(
            "Advanced trends: %d anomalies, seasonality=%s, confidence=%s",
            counts.total,
            seasonality.has_pattern,
            analysis.confidence_score,
        )
        return analysis

    def time_series(self, history: Sequence[BasicStats], metric: Metric) -> list[TimeSeriesPoint]:
        """Dated values of one metric; productivity is tokens per hour."""
        points: list[TimeSeriesPoint] = []
        for index, stats in enumerate(history):
            match metric:
                case "productivity":
                    value = safe_div(stats.total_tokens, stats.total_time_hours)
                case "tokens":
                    value = float(stats.total_tokens)
                case _:
                    value = stats.total_time_hours
            points.append(
                TimeSeriesPoint(
                    date=self._basic.synthetic_date(index, len(history)),
                    value=value,
                    index=index,
                )
            )
        return points

    def detect_anomalies(self, series: Sequence[TimeSeriesPoint]) -> AnomalyReport:
        """Flag points further than ``anomaly_sigma`` standard deviations from the mean."""
        if len(series) < MIN_ANOMALY_POINTS:
            return AnomalyReport(analysis="Not enough data points for anomaly detection")

        values = np.asarray([p.value for p in series], dtype=float)
        mean = float(values.mean())
        threshold = self._config.anomaly_sigma * float(values.std())
        anomalies = [p for p in series if abs(p.value - mean) > threshold]

        if anomalies:
            analysis = f"Detected {len(anomalies)} anomalous data points worth investigating"
        else:
            analysis = "No significant anomalies detected"
        return AnomalyReport(
            anomalies=anomalies,
            anomaly_threshold=round_to(threshold, 2),
            analysis=analysis,
        )

    def moving_average(self, values: Sequence[float], window: int | None = None) -> list[float]:
        """Simple moving average; the result is ``window - 1`` points shorter."""
        size = max(1, window or self._config.moving_average_window)
        if len(values) < size:
            return []
        kernel = np.ones(size) / size
        return [float(v) for v in np.convolve(np.asarray(values, dtype=float), kernel, "valid")]

    def analyze_seasonality(self, daily_metrics: dict[str, DailyMetric]) -> SeasonalityAnalysis:
        """Look for a day-of-week productivity pattern (needs two weeks of days)."""
        dates = sorted(daily_metrics)
        if len(dates) < MIN_SEASONALITY_DAYS:
            return SeasonalityAnalysis(
                pattern_description="Not enough data for seasonality analysis "
                f"(at least {MIN_SEASONALITY_DAYS} days required)"
            )

        by_weekday: dict[str, list[float]] = {}
        for day in dates:
            weekday = WEEKDAYS[date.fromisoformat(day).weekday()]
            by_weekday.setdefault(weekday, []).append(daily_metrics[day].productivity_score)

        patterns = {
            weekday: round_to(float(np.mean(by_weekday[weekday])), 2)
            for weekday in WEEKDAYS
            if weekday in by_weekday
        }
        averages = list(patterns.values())
        has_pattern = len(averages) >= 5 and float(np.var(averages)) > SEASONALITY_VARIANCE

        if not has_pattern:
            return SeasonalityAnalysis(
                pattern_description="No clear weekly pattern detected",
                weekly_patterns=patterns,
            )
        peak = max(patterns, key=patterns.__getitem__)
        return SeasonalityAnalysis(
            has_pattern=True,
            pattern_description=f"Weekly pattern detected, productivity peaks on {peak}",
            weekly_patterns=patterns,
            peak_day=peak,
        )

    def overall_confidence(self, anomalies: AnomalyCounts, points: int) -> float:
        """More points raise confidence, more anomalies lower it; floor of 10."""
        if points <= 0:
            return 0.0
        base = min(90.0, points / 30 * 90)
        penalty = anomalies.total / (points * 3) * 30
        return round_to(clamp(base - penalty, 10.0, 100.0), 1)


def _insufficient_result(timeframe: str) -> TrendAnalysis:
    return TrendAnalysis(
        message=f"Not enough {timeframe} data for trend analysis (at least 2 data points required)"
    )
