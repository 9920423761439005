"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meeting_activity.adapters.supabase_activity_repository import (
    SupabaseActivityRepository,
)
from meeting_activity.adapters.supabase_identity_resolver import (
    SupabaseIdentityResolver,
)
from meeting_activity.adapters.websocket_hub import WebSocketHub
from meeting_activity.config import Settings
from meeting_activity.services.activities import ActivityService
from meeting_activity.services.notifier import ActivityNotifier
from meeting_activity.services.sessions import TrackerRegistry
from meeting_activity.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    activity_service: ActivityService
    hub: WebSocketHub
    notifier: ActivityNotifier
    tracker_registry: TrackerRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    activity_repository = SupabaseActivityRepository(
        supabase_client,
        table=resolved_settings.activities_table,
        users_table=resolved_settings.users_table,
    )
    user_service = UserService(SupabaseIdentityResolver(supabase_client))
    activity_service = ActivityService(activity_repository)
    hub = WebSocketHub()
    notifier = ActivityNotifier(channel=hub, activity_service=activity_service)
    tracker_registry = TrackerRegistry(
        activity_service=activity_service, notifier=notifier
    )

    async def close_resources() -> None:
        await tracker_registry.drain()

    return AppContainer(
        settings=resolved_settings,
        user_service=user_service,
        activity_service=activity_service,
        hub=hub,
        notifier=notifier,
        tracker_registry=tracker_registry,
        close_resources=close_resources,
    )
