"""Configuration for ccstats analytics."""

from dataclasses import dataclass, field

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"


def _default_line_model() -> dict[str, int]:
    # Average lines changed per tool invocation
    return {
        "Edit": 15,
        "MultiEdit": 35,
        "Write": 60,
        "Read": 0,
        "Bash": 8,
        "Grep": 0,
        "Glob": 0,
        "Task": 40,
        "LS": 0,
        "WebFetch": 0,
        "NotebookEdit": 25,
    }


def _default_tool_scores() -> dict[str, float]:
    return {
        "Edit": 8,
        "MultiEdit": 9,
        "Write": 7,
        "Task": 8,
        "Read": 5,
        "Bash": 6,
        "Grep": 4,
        "Glob": 4,
        "LS": 3,
    }


@dataclass(frozen=True)
class ProductivityWeights:
    """Weights applied to each productivity sub-score maximum."""

    token_weight: float = 0.3
    lines_weight: float = 0.4
    tools_weight: float = 0.2
    session_weight: float = 0.1


@dataclass(frozen=True)
class AnalyticsConfig:
    """Analytics configuration."""

    line_estimation_model: dict[str, int] = field(default_factory=_default_line_model)
    default_lines_per_use: int = 10
    edit_tools: tuple[str, ...] = ("Edit", "MultiEdit", "Write", "NotebookEdit")
    tool_base_scores: dict[str, float] = field(default_factory=_default_tool_scores)
    default_tool_score: float = 5.0
    productivity_weights: ProductivityWeights = field(default_factory=ProductivityWeights)
    max_insights: int = 8
    max_recommendations: int = 6
    moving_average_window: int = 3
    anomaly_sigma: float = 2.0
    enabled_analyses: tuple[str, ...] = ("basic", "efficiency", "trends", "insights")
    default_model: str = DEFAULT_MODEL

    @property
    def productivity_max(self) -> float:
        """Weighted maximum of the productivity sub-scores."""
        w = self.productivity_weights
        return 3 * w.token_weight + 4 * w.lines_weight + 2 * w.tools_weight + w.session_weight
