"""Supabase-backed user repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from pantry_analytics.domain.models import UserRecord
from pantry_analytics.services.auth import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user lookups."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user with the id, if present."""
        response = (
            self.client.table("users")
            .select("id, email, first_name")
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return UserRecord(
                id=UUID(row["id"]),
                email=row.get("email"),
                first_name=row.get("first_name"),
            )
        return None
