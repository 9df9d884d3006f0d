"""Supabase repository for inventory usage analytics."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pantry_analytics.domain.analytics import PeriodWindow
from pantry_analytics.domain.inventory import (
    DeleteReason,
    DeletionRecord,
    FoodCategory,
    MealUsageRecord,
)
from pantry_analytics.services.analytics import UsageSampleRepository
from pantry_analytics.services.metrics import UsageRepository

MEAL_USAGE_TYPE = "meal"


@dataclass
class SupabaseUsageRepository(UsageRepository, UsageSampleRepository):
    """Supabase implementation for meal deductions and soft deletions."""

    client: Client

    def list_meal_usage(
        self, user_id: UUID, window: PeriodWindow
    ) -> list[MealUsageRecord]:
        """Return meal deductions joined to their inventory item."""
        response = (
            self.client.table("inventory_usage")
            .select(
                "amount_used, unit, used_at, item_id, "
                "fridge_items:item_id(category, item_name)"
            )
            .eq("user_id", str(user_id))
            .gte("used_at", window.start.isoformat())
            .lt("used_at", window.end.isoformat())
            .eq("usage_type", MEAL_USAGE_TYPE)
            .order("used_at", desc=True)
            .execute()
        )
        return [_parse_usage(row) for row in response.data or []]

    def list_deletions(
        self, user_id: UUID, reason: DeleteReason, window: PeriodWindow
    ) -> list[DeletionRecord]:
        """Return items soft-deleted for the reason inside the window."""
        response = (
            self.client.table("fridge_items")
            .select("quantity, category, item_name, delete_reason, deleted_at")
            .eq("user_id", str(user_id))
            .eq("delete_reason", reason.value)
            .gte("deleted_at", window.start.isoformat())
            .lt("deleted_at", window.end.isoformat())
            .order("deleted_at", desc=True)
            .execute()
        )
        return [_parse_deletion(row, reason) for row in response.data or []]

    def list_recent_items(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        """Return the most recently created inventory items."""
        response = (
            self.client.table("fridge_items")
            .select(
                "id, item_name, quantity, category, delete_reason, deleted_at, "
                "created_at"
            )
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def list_recent_deletions(
        self, user_id: UUID, limit: int
    ) -> list[dict[str, object]]:
        """Return the most recent soft-deleted items that carry a reason."""
        response = (
            self.client.table("fridge_items")
            .select("id, item_name, quantity, category, delete_reason, deleted_at")
            .eq("user_id", str(user_id))
            .not_.is_("deleted_at", "null")
            .not_.is_("delete_reason", "null")
            .order("deleted_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def list_recent_usage(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        """Return the most recent inventory usage rows."""
        response = (
            self.client.table("inventory_usage")
            .select("id, amount_used, unit, usage_type, used_at, notes")
            .eq("user_id", str(user_id))
            .order("used_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []


def _parse_usage(row: dict[str, object]) -> MealUsageRecord:
    item = row.get("fridge_items")
    if not isinstance(item, dict):
        return MealUsageRecord(
            amount_used=_parse_amount(row.get("amount_used")),
            unit=_as_str(row.get("unit")),
            used_at=_parse_timestamp(row.get("used_at")),
            item_name=None,
            category=None,
            linked=False,
        )
    return MealUsageRecord(
        amount_used=_parse_amount(row.get("amount_used")),
        unit=_as_str(row.get("unit")),
        used_at=_parse_timestamp(row.get("used_at")),
        item_name=_parse_name(item.get("item_name")),
        category=FoodCategory.parse(_as_str(item.get("category"))),
    )


def _parse_deletion(row: dict[str, object], reason: DeleteReason) -> DeletionRecord:
    return DeletionRecord(
        item_name=_parse_name(row.get("item_name")),
        category=FoodCategory.parse(_as_str(row.get("category"))),
        quantity=_parse_amount(row.get("quantity")),
        deleted_at=_parse_timestamp(row.get("deleted_at")),
        delete_reason=reason,
    )


def _parse_amount(raw: object) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _parse_timestamp(raw: object) -> datetime:
    if isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.min.replace(tzinfo=UTC)


def _parse_name(raw: object) -> str | None:
    return raw if isinstance(raw, str) and raw else None


def _as_str(raw: object) -> str | None:
    return raw if isinstance(raw, str) else None
