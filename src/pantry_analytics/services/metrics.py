"""Consumption, wastage and frequency metrics over inventory usage.

Consumption is the sum of two independent sources: meal deductions recorded in
``inventory_usage`` and items soft-deleted as ``used_up``. The sources describe
different real-world actions (cooking versus manual bookkeeping), so they are
added together and never deduplicated against each other. Wastage only counts
items soft-deleted as ``thrown_away``. Deletions marked ``mistake`` are
corrections and never reach any metric.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar
from uuid import UUID

from pantry_analytics.domain.analytics import (
    MetricOutcome,
    MetricResult,
    MostUsedEntry,
    PeriodWindow,
)
from pantry_analytics.domain.inventory import (
    DeleteReason,
    DeletionRecord,
    FoodCategory,
    MealUsageRecord,
)
from pantry_analytics.services.costs import (
    estimated_unit_cost,
    round_half_up,
    round_money,
)

MOST_USED_LIMIT = 5
SECONDS_PER_DAY = 86400

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class UsageRepository(Protocol):
    """Read interface for the two usage sources."""

    def list_meal_usage(
        self, user_id: UUID, window: PeriodWindow
    ) -> list[MealUsageRecord]:
        """Return meal deductions with used_at inside the window."""

    def list_deletions(
        self, user_id: UUID, reason: DeleteReason, window: PeriodWindow
    ) -> list[DeletionRecord]:
        """Return soft-deleted items with the reason and deleted_at inside the window."""


def consumption_metrics(
    meal_usage: Iterable[MealUsageRecord], used_up: Iterable[DeletionRecord]
) -> MetricResult:
    """Sum meal deductions and used-up deletions into one total."""
    total_items = 0.0
    estimated_value = 0.0
    for usage in meal_usage:
        if not usage.has_linked_item:
            continue
        total_items += usage.amount_used
        estimated_value += usage.amount_used * estimated_unit_cost(usage.category)
    for deletion in used_up:
        total_items += deletion.quantity
        estimated_value += deletion.quantity * estimated_unit_cost(deletion.category)
    return MetricResult(
        total_items=round_money(total_items),
        estimated_value=round_money(estimated_value),
    )


def wastage_metrics(thrown_away: Iterable[DeletionRecord]) -> MetricResult:
    """Sum thrown-away deletions."""
    return consumption_metrics([], thrown_away)


def category_breakdown(
    meal_usage: Iterable[MealUsageRecord], used_up: Iterable[DeletionRecord]
) -> dict[str, int]:
    """Return each category's rounded percentage share of consumed quantity.

    Percentages are rounded independently and may not sum to exactly 100.
    """
    totals: dict[str, float] = {}
    grand_total = 0.0
    quantities = [
        (usage.category or FoodCategory.OTHER, usage.amount_used)
        for usage in meal_usage
        if usage.has_linked_item
    ] + [(deletion.category, deletion.quantity) for deletion in used_up]
    for category, quantity in quantities:
        label = str(category)
        totals[label] = totals.get(label, 0.0) + quantity
        grand_total += quantity
    if grand_total <= 0:
        return {}
    return {
        label: int(round_half_up(total / grand_total * 100))
        for label, total in totals.items()
    }


@dataclass
class _ItemStats:
    count: int = 0
    total_amount: float = 0.0
    dates: list[datetime] = field(default_factory=list)


def most_used_items(
    meal_usage: Iterable[MealUsageRecord],
    used_up: Iterable[DeletionRecord],
    limit: int = MOST_USED_LIMIT,
) -> list[MostUsedEntry]:
    """Return the most frequently used items, grouped by name across both sources."""
    stats: dict[str, _ItemStats] = {}
    events = [
        (usage.item_name, usage.amount_used, usage.used_at) for usage in meal_usage
    ] + [
        (deletion.item_name, deletion.quantity, deletion.deleted_at)
        for deletion in used_up
    ]
    for item_name, amount, moment in events:
        if not item_name:
            continue
        entry = stats.setdefault(item_name, _ItemStats())
        entry.count += 1
        entry.total_amount += amount
        entry.dates.append(moment)

    ranked = [
        MostUsedEntry(
            item_name=item_name,
            count=entry.count,
            avg_days=_average_gap_days(entry.dates),
        )
        for item_name, entry in stats.items()
    ]
    # sorted() is stable, so ties keep the order the reads returned them in.
    ranked = sorted(ranked, key=lambda item: item.count, reverse=True)
    return ranked[:limit]


def _average_gap_days(dates: list[datetime]) -> int:
    if len(dates) < 2:  # noqa: PLR2004
        return 0
    ordered = sorted(dates)
    gaps = [
        (later - earlier).total_seconds() / SECONDS_PER_DAY
        for earlier, later in zip(ordered, ordered[1:], strict=False)
    ]
    return int(round_half_up(sum(gaps) / len(gaps)))


@dataclass
class MetricsEngine:
    """Runs metric computations against the store, failing soft per metric."""

    repository: UsageRepository

    async def consumption(
        self, user_id: UUID, window: PeriodWindow, request_id: str | None = None
    ) -> MetricOutcome[MetricResult]:
        """Return consumption totals, or zeros when a read fails."""

        async def compute() -> MetricResult:
            meal_usage, used_up = await asyncio.gather(
                self._meal_usage(user_id, window),
                self._deletions(user_id, DeleteReason.USED_UP, window),
            )
            return consumption_metrics(meal_usage, used_up)

        return await self._fail_soft(
            "consumption", compute, MetricResult(0, 0), window, request_id
        )

    async def wastage(
        self, user_id: UUID, window: PeriodWindow, request_id: str | None = None
    ) -> MetricOutcome[MetricResult]:
        """Return wastage totals, or zeros when a read fails."""

        async def compute() -> MetricResult:
            thrown_away = await self._deletions(
                user_id, DeleteReason.THROWN_AWAY, window
            )
            return wastage_metrics(thrown_away)

        return await self._fail_soft(
            "wastage", compute, MetricResult(0, 0), window, request_id
        )

    async def categories(
        self, user_id: UUID, window: PeriodWindow, request_id: str | None = None
    ) -> MetricOutcome[dict[str, int]]:
        """Return the category breakdown, or an empty mapping when a read fails."""

        async def compute() -> dict[str, int]:
            meal_usage, used_up = await asyncio.gather(
                self._meal_usage(user_id, window),
                self._deletions(user_id, DeleteReason.USED_UP, window),
            )
            return category_breakdown(meal_usage, used_up)

        return await self._fail_soft(
            "category_breakdown", compute, {}, window, request_id
        )

    async def most_used(
        self, user_id: UUID, window: PeriodWindow, request_id: str | None = None
    ) -> MetricOutcome[list[MostUsedEntry]]:
        """Return the top items, or an empty list when a read fails."""

        async def compute() -> list[MostUsedEntry]:
            meal_usage, used_up = await asyncio.gather(
                self._meal_usage(user_id, window),
                self._deletions(user_id, DeleteReason.USED_UP, window),
            )
            return most_used_items(meal_usage, used_up)

        return await self._fail_soft(
            "most_used_items", compute, [], window, request_id
        )

    async def _meal_usage(
        self, user_id: UUID, window: PeriodWindow
    ) -> list[MealUsageRecord]:
        return await asyncio.to_thread(
            self.repository.list_meal_usage, user_id, window
        )

    async def _deletions(
        self, user_id: UUID, reason: DeleteReason, window: PeriodWindow
    ) -> list[DeletionRecord]:
        return await asyncio.to_thread(
            self.repository.list_deletions, user_id, reason, window
        )

    async def _fail_soft(  # noqa: PLR0913
        self,
        metric: str,
        compute: Callable[[], Awaitable[T]],
        default: T,
        window: PeriodWindow,
        request_id: str | None,
    ) -> MetricOutcome[T]:
        try:
            return MetricOutcome.ok(await compute())
        except Exception as exc:
            _logger.exception(
                "Metric %s failed, using default",
                metric,
                extra={
                    "request_id": request_id,
                    "window_start": window.start.isoformat(),
                    "window_end": window.end.isoformat(),
                },
            )
            return MetricOutcome.degraded(default, f"{type(exc).__name__}: {exc}")
