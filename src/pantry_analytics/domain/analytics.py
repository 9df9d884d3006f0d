"""Domain models for usage analytics reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PeriodWindow:
    """Half-open time interval [start, end)."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        """Return true when the moment falls inside the window."""
        return self.start <= moment < self.end


@dataclass(frozen=True)
class AnalysisWindows:
    """Current window and the equal-length window right before it."""

    days: int
    current: PeriodWindow
    previous: PeriodWindow


@dataclass(frozen=True)
class MetricResult:
    """Rounded quantity and estimated value totals."""

    total_items: float
    estimated_value: float


@dataclass(frozen=True)
class MostUsedEntry:
    """Item usage frequency within a window."""

    item_name: str
    count: int
    avg_days: int


@dataclass(frozen=True)
class MetricOutcome(Generic[T]):
    """Value of one metric computation, optionally degraded to a default."""

    value: T
    degraded_reason: str | None = None

    @property
    def is_degraded(self) -> bool:
        return self.degraded_reason is not None

    @classmethod
    def ok(cls, value: T) -> "MetricOutcome[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, default: T, reason: str) -> "MetricOutcome[T]":
        return cls(value=default, degraded_reason=reason)


@dataclass(frozen=True)
class PeriodSummary:
    """Consumption and wastage figures for one window."""

    items_consumed: float
    items_wasted: float
    value_saved: float
    usage_percentage: int


@dataclass(frozen=True)
class AnalyticsReport:
    """Usage analytics for a window compared with the window before it."""

    current: PeriodSummary
    previous: PeriodSummary
    category_breakdown: dict[str, int]
    most_used_items: list[MostUsedEntry]
    windows: AnalysisWindows
    degraded: list[str] = field(default_factory=list)
