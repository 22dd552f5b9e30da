"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import time

from supabase import create_client

from expiry_tracker.adapters.expo_push_client import HttpxExpoPushClient
from expiry_tracker.adapters.supabase_inventory_repository import (
    SupabaseInventoryRepository,
)
from expiry_tracker.adapters.supabase_scheduled_notification_repository import (
    SupabaseScheduledNotificationRepository,
)
from expiry_tracker.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from expiry_tracker.config import Settings, parse_time_of_day
from expiry_tracker.services.delivery import PushNotificationPlatform
from expiry_tracker.services.inventory import InventoryService
from expiry_tracker.services.meal_planning import MealPlanner
from expiry_tracker.services.notifications import SmartNotificationService
from expiry_tracker.services.user_settings import UserSettingsService
from expiry_tracker.services.waste import WasteReportService

_DEFAULT_WARNING_TIME = time(9, 0)
_DEFAULT_SOON_TIME = time(10, 0)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    inventory_service: InventoryService
    user_settings_service: UserSettingsService
    waste_report_service: WasteReportService
    meal_planner: MealPlanner
    notification_platform: PushNotificationPlatform
    notification_service: SmartNotificationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    inventory_repository = SupabaseInventoryRepository(supabase_client)
    user_settings_repository = SupabaseUserSettingsRepository(supabase_client)
    schedule_repository = SupabaseScheduledNotificationRepository(supabase_client)
    push_client = HttpxExpoPushClient.create(
        push_url=resolved_settings.expo_push_url,
        access_token=resolved_settings.expo_access_token,
    )

    inventory_service = InventoryService(inventory_repository)
    user_settings_service = UserSettingsService(user_settings_repository)
    waste_report_service = WasteReportService(
        repository=inventory_repository,
        timezone_name=resolved_settings.timezone,
    )
    meal_planner = MealPlanner()
    platform = PushNotificationPlatform(
        push_client=push_client,
        token_repository=user_settings_repository,
        schedule_repository=schedule_repository,
        user_id=resolved_settings.owner_user_id,
        timezone_name=resolved_settings.timezone,
    )
    notification_service = SmartNotificationService(
        platform=platform,
        settings_service=user_settings_service,
        inventory_service=inventory_service,
        meal_suggester=meal_planner,
        user_id=resolved_settings.owner_user_id,
        timezone_name=resolved_settings.timezone,
        warning_time=parse_time_of_day(
            resolved_settings.warning_notify_time, _DEFAULT_WARNING_TIME
        ),
        preferred_time=parse_time_of_day(
            resolved_settings.soon_notify_time, _DEFAULT_SOON_TIME
        ),
        follow_up_hours=resolved_settings.critical_follow_up_hours,
        follow_up_count=resolved_settings.critical_follow_up_count,
        extend_expiry_days=resolved_settings.extend_expiry_days,
    )

    async def close_resources() -> None:
        await push_client.close()

    return AppContainer(
        settings=resolved_settings,
        inventory_service=inventory_service,
        user_settings_service=user_settings_service,
        waste_report_service=waste_report_service,
        meal_planner=meal_planner,
        notification_platform=platform,
        notification_service=notification_service,
        close_resources=close_resources,
    )
