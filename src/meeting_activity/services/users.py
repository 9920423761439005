"""Authenticated user lookup."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meeting_activity.domain.errors import AuthenticationRequired


class IdentityResolver(Protocol):
    """Interface for resolving an access token to a user id."""

    def resolve(self, access_token: str) -> UUID | None:
        """Return the user id for the token, or None when it is not valid."""


@dataclass
class UserService:
    """Application service for identifying the calling user."""

    resolver: IdentityResolver

    def current_user(self, access_token: str | None) -> UUID | None:
        """Return the authenticated user id, if any."""
        if not access_token:
            return None
        return self.resolver.resolve(access_token)

    def require_user(self, access_token: str | None) -> UUID:
        """Return the authenticated user id or raise AuthenticationRequired."""
        user_id = self.current_user(access_token)
        if user_id is None:
            raise AuthenticationRequired
        return user_id
