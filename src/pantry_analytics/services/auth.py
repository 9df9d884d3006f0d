"""Bearer token verification."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from pantry_analytics.domain.models import UserRecord

_logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "
_EMPTY_TOKENS = {"", "null", "undefined"}


class AuthenticationError(Exception):
    """Raised when a request cannot be tied to a known user."""

    def __init__(self, error: str, details: str) -> None:
        super().__init__(details)
        self.error = error
        self.details = details


class UserRepository(Protocol):
    """Persistence interface for user lookups."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user with the id, if present."""


@dataclass
class AuthService:
    """Verifies bearer tokens and resolves the user they belong to."""

    repository: UserRepository
    secret: str
    algorithm: str = "HS256"

    def authenticate(self, authorization: str | None) -> UserRecord:
        """Return the user for an Authorization header value."""
        if not authorization:
            raise AuthenticationError(
                "No authorization header provided", "Missing Authorization header"
            )
        if not authorization.startswith(_BEARER_PREFIX):
            raise AuthenticationError(
                "Invalid authorization format",
                'Authorization header must start with "Bearer "',
            )
        token = authorization[len(_BEARER_PREFIX) :].strip()
        if token in _EMPTY_TOKENS:
            raise AuthenticationError(
                "Invalid token provided", "Token value is null or undefined"
            )
        return self.verify(token)

    def verify(self, token: str) -> UserRecord:
        """Decode a signed token and return its user."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise AuthenticationError(
                "Token expired", "Your session has expired. Please log in again."
            ) from exc
        except InvalidTokenError as exc:
            raise AuthenticationError(
                "Invalid token", "The token is malformed or invalid"
            ) from exc

        try:
            user_id = UUID(str(claims.get("userId")))
        except ValueError as exc:
            raise AuthenticationError(
                "Invalid token", "Token payload has no valid userId"
            ) from exc

        user = self.repository.get_user(user_id)
        if user is None:
            _logger.info("Token user not found: user_id=%s", user_id)
            raise AuthenticationError(
                "User not found", "No user found with this token ID"
            )
        return user
