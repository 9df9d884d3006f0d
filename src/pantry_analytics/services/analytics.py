"""Usage analytics report assembly."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from pantry_analytics.domain.analytics import (
    AnalysisWindows,
    AnalyticsReport,
    MetricOutcome,
    MetricResult,
    PeriodSummary,
)
from pantry_analytics.services.costs import round_half_up
from pantry_analytics.services.metrics import MetricsEngine
from pantry_analytics.services.windows import compute_windows

DEBUG_SAMPLE_LIMIT = 10
DEBUG_PREVIEW_SIZE = 2

_logger = logging.getLogger(__name__)


class UsageSampleRepository(Protocol):
    """Raw recent-record reads used for diagnosing empty reports."""

    def list_recent_items(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        """Return the most recently created inventory items."""

    def list_recent_deletions(
        self, user_id: UUID, limit: int
    ) -> list[dict[str, object]]:
        """Return the most recent soft-deleted items that carry a reason."""

    def list_recent_usage(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        """Return the most recent inventory usage rows of any type."""


@dataclass
class AnalyticsService:
    """Builds usage analytics reports for a user."""

    engine: MetricsEngine
    samples: UsageSampleRepository
    max_days: int | None = None

    async def build_report(
        self,
        user_id: UUID,
        days: int,
        now: datetime | None = None,
        request_id: str | None = None,
    ) -> AnalyticsReport:
        """Compute the report for the trailing window of the given length."""
        windows = compute_windows(
            days, now or datetime.now(tz=UTC), max_days=self.max_days
        )
        current, previous = windows.current, windows.previous
        _logger.info(
            "Building analytics: user_id=%s days=%s current=%s..%s",
            user_id,
            days,
            current.start.isoformat(),
            current.end.isoformat(),
            extra={"request_id": request_id},
        )
        (
            consumption,
            wastage,
            categories,
            most_used,
            previous_consumption,
            previous_wastage,
        ) = await asyncio.gather(
            self.engine.consumption(user_id, current, request_id),
            self.engine.wastage(user_id, current, request_id),
            self.engine.categories(user_id, current, request_id),
            self.engine.most_used(user_id, current, request_id),
            self.engine.consumption(user_id, previous, request_id),
            self.engine.wastage(user_id, previous, request_id),
        )
        outcomes: dict[str, MetricOutcome] = {
            "consumption": consumption,
            "wastage": wastage,
            "category_breakdown": categories,
            "most_used_items": most_used,
            "previous_consumption": previous_consumption,
            "previous_wastage": previous_wastage,
        }
        degraded = [name for name, outcome in outcomes.items() if outcome.is_degraded]
        if degraded:
            _logger.warning(
                "Analytics report degraded: %s",
                ", ".join(degraded),
                extra={"request_id": request_id},
            )

        report = AnalyticsReport(
            current=_summarize(consumption.value, wastage.value),
            previous=_summarize(previous_consumption.value, previous_wastage.value),
            category_breakdown=categories.value,
            most_used_items=most_used.value,
            windows=windows,
            degraded=degraded,
        )
        _logger.info(
            "Analytics calculated: consumed=%s wasted=%s usage=%s%% value=%.2f",
            report.current.items_consumed,
            report.current.items_wasted,
            report.current.usage_percentage,
            report.current.value_saved,
            extra={"request_id": request_id},
        )
        return report

    async def debug_snapshot(
        self, user_id: UUID, days: int, now: datetime | None = None
    ) -> dict[str, object]:
        """Return raw record counts and samples for troubleshooting a report."""
        windows = compute_windows(
            days, now or datetime.now(tz=UTC), max_days=self.max_days
        )
        items, deletions, usage = await asyncio.gather(
            self._sample("fridge_items", self.samples.list_recent_items, user_id),
            self._sample(
                "deleted fridge_items", self.samples.list_recent_deletions, user_id
            ),
            self._sample("inventory_usage", self.samples.list_recent_usage, user_id),
        )
        in_range = [
            row for row in deletions if _in_window(row.get("deleted_at"), windows)
        ]
        return {
            "userId": str(user_id),
            "authentication": "successful",
            "totalFridgeItems": len(items),
            "deletedItemsCount": len(deletions),
            "inventoryUsageRecords": len(usage),
            "dateRange": _period_payload(windows),
            "recentDeletionsInRange": len(in_range),
            "sampleData": {
                "recentItems": items[:DEBUG_PREVIEW_SIZE],
                "recentDeletions": deletions[:DEBUG_PREVIEW_SIZE],
                "recentUsage": usage[:DEBUG_PREVIEW_SIZE],
            },
        }

    async def _sample(
        self,
        source: str,
        read: Callable[[UUID, int], list[dict[str, object]]],
        user_id: UUID,
    ) -> list[dict[str, object]]:
        try:
            return await asyncio.to_thread(read, user_id, DEBUG_SAMPLE_LIMIT)
        except Exception:
            _logger.exception(
                "Debug read of %s failed", source, extra={"user_id": str(user_id)}
            )
            return []


def usage_percentage(consumed: float, wasted: float) -> int:
    """Return the consumed share of processed items, 0 when nothing was processed."""
    processed = consumed + wasted
    if processed <= 0:
        return 0
    return int(round_half_up(consumed / processed * 100))


def serialize_report(report: AnalyticsReport) -> dict[str, object]:
    """Return the client-facing JSON shape of a report."""
    return {
        "itemsConsumed": report.current.items_consumed,
        "itemsWasted": report.current.items_wasted,
        "valueSaved": report.current.value_saved,
        "usagePercentage": report.current.usage_percentage,
        "previousPeriod": {
            "itemsConsumed": report.previous.items_consumed,
            "itemsWasted": report.previous.items_wasted,
            "valueSaved": report.previous.value_saved,
            "usagePercentage": report.previous.usage_percentage,
        },
        "categoryBreakdown": dict(report.category_breakdown),
        "mostUsedItems": [
            {"itemName": item.item_name, "count": item.count, "avgDays": item.avg_days}
            for item in report.most_used_items
        ],
        "period": _period_payload(report.windows),
    }


def _summarize(consumption: MetricResult, wastage: MetricResult) -> PeriodSummary:
    return PeriodSummary(
        items_consumed=consumption.total_items,
        items_wasted=wastage.total_items,
        value_saved=consumption.estimated_value,
        usage_percentage=usage_percentage(
            consumption.total_items, wastage.total_items
        ),
    )


def _period_payload(windows: AnalysisWindows) -> dict[str, object]:
    return {
        "days": windows.days,
        "startDate": windows.current.start.isoformat(),
        "endDate": windows.current.end.isoformat(),
    }


def _in_window(raw: object, windows: AnalysisWindows) -> bool:
    if not isinstance(raw, str) or not raw:
        return False
    try:
        moment = datetime.fromisoformat(raw)
    except ValueError:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    current = windows.current
    return current.start <= moment <= current.end
