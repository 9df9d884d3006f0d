"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import jwt
import pytest

from pantry_analytics.config import Settings
from pantry_analytics.containers import AppContainer
from pantry_analytics.domain.analytics import PeriodWindow
from pantry_analytics.domain.inventory import (
    DeleteReason,
    DeletionRecord,
    FoodCategory,
    MealUsageRecord,
)
from pantry_analytics.domain.models import UserRecord
from pantry_analytics.services.analytics import (
    AnalyticsService,
    UsageSampleRepository,
)
from pantry_analytics.services.auth import AuthService, UserRepository
from pantry_analytics.services.metrics import MetricsEngine, UsageRepository

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=UTC)
JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"


def meal_usage(  # noqa: PLR0913
    amount: float,
    used_at: datetime,
    item_name: str | None = "Eggs",
    category: FoodCategory | None = FoodCategory.PROTEIN,
    unit: str | None = "units",
    linked: bool = True,
) -> MealUsageRecord:
    return MealUsageRecord(
        amount_used=amount,
        unit=unit,
        used_at=used_at,
        item_name=item_name,
        category=category,
        linked=linked,
    )


def deletion(
    quantity: float,
    deleted_at: datetime,
    reason: DeleteReason = DeleteReason.USED_UP,
    item_name: str | None = "Eggs",
    category: FoodCategory = FoodCategory.PROTEIN,
) -> DeletionRecord:
    return DeletionRecord(
        item_name=item_name,
        category=category,
        quantity=quantity,
        deleted_at=deleted_at,
        delete_reason=reason,
    )


def make_token(user_id: UUID, expires_in: timedelta = timedelta(hours=1)) -> str:
    payload = {
        "userId": str(user_id),
        "exp": datetime.now(tz=UTC) + expires_in,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@dataclass
class InMemoryUsageRepository(UsageRepository, UsageSampleRepository):
    """In-memory usage repository for tests."""

    usage: list[MealUsageRecord] = field(default_factory=list)
    deletions: list[DeletionRecord] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def list_meal_usage(
        self, user_id: UUID, window: PeriodWindow
    ) -> list[MealUsageRecord]:
        self.calls.append("meal_usage")
        if "meal_usage" in self.failing:
            raise RuntimeError("inventory_usage unavailable")
        return [row for row in self.usage if window.contains(row.used_at)]

    def list_deletions(
        self, user_id: UUID, reason: DeleteReason, window: PeriodWindow
    ) -> list[DeletionRecord]:
        self.calls.append(reason.value)
        if reason.value in self.failing:
            raise RuntimeError("fridge_items unavailable")
        return [
            row
            for row in self.deletions
            if row.delete_reason == reason and window.contains(row.deleted_at)
        ]

    def list_recent_items(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        if "recent_items" in self.failing:
            raise RuntimeError("fridge_items unavailable")
        return [
            {"item_name": row.item_name, "deleted_at": row.deleted_at.isoformat()}
            for row in self.deletions
        ][:limit]

    def list_recent_deletions(
        self, user_id: UUID, limit: int
    ) -> list[dict[str, object]]:
        ordered = sorted(self.deletions, key=lambda row: row.deleted_at, reverse=True)
        return [
            {
                "item_name": row.item_name,
                "delete_reason": row.delete_reason.value,
                "deleted_at": row.deleted_at.isoformat(),
            }
            for row in ordered
        ][:limit]

    def list_recent_usage(self, user_id: UUID, limit: int) -> list[dict[str, object]]:
        if "recent_usage" in self.failing:
            raise RuntimeError("inventory_usage unavailable")
        return [
            {"amount_used": row.amount_used, "used_at": row.used_at.isoformat()}
            for row in self.usage
        ][:limit]


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)
    lookups_on_event_loop: list[bool] = field(default_factory=list)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        self.lookups_on_event_loop.append(_on_event_loop())
        return self.users.get(user_id)


def _on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=jwt.encode(
            {"role": "service_role"}, "supabase-secret-0123456789abcdef01234567"
        ),
        jwt_secret=JWT_SECRET,
        environment="test",
    )


@pytest.fixture
def usage_repository() -> InMemoryUsageRepository:
    return InMemoryUsageRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def user(user_repository: InMemoryUserRepository) -> UserRecord:
    record = UserRecord(id=uuid4(), email="cook@example.com", first_name="Sam")
    user_repository.users[record.id] = record
    return record


@pytest.fixture
def container(
    settings: Settings,
    usage_repository: InMemoryUsageRepository,
    user_repository: InMemoryUserRepository,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        auth_service=AuthService(
            repository=user_repository,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        ),
        analytics_service=AnalyticsService(
            engine=MetricsEngine(usage_repository),
            samples=usage_repository,
            max_days=settings.analytics_max_days,
        ),
    )
