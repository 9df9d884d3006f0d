"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from pantry_analytics.adapters.supabase_usage_repository import (
    SupabaseUsageRepository,
)
from pantry_analytics.adapters.supabase_user_repository import SupabaseUserRepository
from pantry_analytics.config import Settings
from pantry_analytics.services.analytics import AnalyticsService
from pantry_analytics.services.auth import AuthService
from pantry_analytics.services.metrics import MetricsEngine


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    analytics_service: AnalyticsService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    usage_repository = SupabaseUsageRepository(supabase_client)
    auth_service = AuthService(
        repository=user_repository,
        secret=resolved_settings.jwt_secret,
        algorithm=resolved_settings.jwt_algorithm,
    )
    analytics_service = AnalyticsService(
        engine=MetricsEngine(usage_repository),
        samples=usage_repository,
        max_days=resolved_settings.analytics_max_days,
    )

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        analytics_service=analytics_service,
    )
