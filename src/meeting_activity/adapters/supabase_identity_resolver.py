"""Supabase Auth-backed identity resolver."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from meeting_activity.services.users import IdentityResolver

logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityResolver(IdentityResolver):
    """Resolves Supabase access tokens to user ids."""

    client: Client

    def resolve(self, access_token: str) -> UUID | None:
        """Return the user id behind a Supabase JWT, if it is valid."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            logger.info("Rejected access token")
            return None
        if response is None or response.user is None:
            return None
        return UUID(str(response.user.id))
