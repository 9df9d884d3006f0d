"""Domain models for the pantry analytics service."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents an authenticated user stored in the database."""

    id: UUID
    email: str | None = None
    first_name: str | None = None
