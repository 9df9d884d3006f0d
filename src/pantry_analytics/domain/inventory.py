"""Domain models for inventory usage records."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class FoodCategory(StrEnum):
    """Coarse food categories used for cost and breakdown math."""

    PROTEIN = "Protein"
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    DAIRY = "Dairy"
    GRAINS = "Grains"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: "str | FoodCategory | None") -> "FoodCategory":
        """Map a raw store category onto a known member, defaulting to Other."""
        if isinstance(raw, FoodCategory):
            return raw
        if not raw:
            return cls.OTHER
        return _CATEGORY_ALIASES.get(raw.strip().lower(), cls.OTHER)


_CATEGORY_ALIASES = {
    "protein": FoodCategory.PROTEIN,
    "proteins": FoodCategory.PROTEIN,
    "vegetable": FoodCategory.VEGETABLES,
    "vegetables": FoodCategory.VEGETABLES,
    "fruit": FoodCategory.FRUITS,
    "fruits": FoodCategory.FRUITS,
    "dairy": FoodCategory.DAIRY,
    "grain": FoodCategory.GRAINS,
    "grains": FoodCategory.GRAINS,
    "pasta": FoodCategory.GRAINS,
    "other": FoodCategory.OTHER,
}


class DeleteReason(StrEnum):
    """Reason recorded when an inventory item is soft-deleted."""

    MISTAKE = "mistake"
    USED_UP = "used_up"
    THROWN_AWAY = "thrown_away"


@dataclass(frozen=True)
class MealUsageRecord:
    """A meal deduction from inventory_usage with its linked item, if any."""

    amount_used: float
    unit: str | None
    used_at: datetime
    item_name: str | None
    category: FoodCategory | None
    linked: bool = True

    @property
    def has_linked_item(self) -> bool:
        """Return true when the originating inventory item still resolves."""
        return self.linked


@dataclass(frozen=True)
class DeletionRecord:
    """A soft-deleted inventory item."""

    item_name: str | None
    category: FoodCategory
    quantity: float
    deleted_at: datetime
    delete_reason: DeleteReason
