"""Inventory, report and notification endpoints behind an API token."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from expiry_tracker.api.models import (
    NotificationActionRequest,
    NotificationSettingsUpdate,
)
from expiry_tracker.domain.urgency import UrgencyLevel
from expiry_tracker.domain.waste import ALL_LOCATIONS, Granularity, WasteFilters
from expiry_tracker.services.urgency import (
    dominant_urgency_dot,
    filter_by_urgency,
    format_expiry,
    sort_by_urgency,
    with_urgency,
)

if TYPE_CHECKING:
    from expiry_tracker.containers import AppContainer

router = APIRouter()


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/items/urgency", dependencies=[Depends(require_token)], tags=["items"])
async def items_by_urgency(
    request: Request, level: UrgencyLevel | None = None
) -> dict[str, object]:
    """Return active items ordered by urgency."""
    container: AppContainer = request.app.state.container
    service = container.notification_service
    now = service.local_now()
    items = container.inventory_service.list_active_items(service.user_id)
    if level is not None:
        items = filter_by_urgency(items, level, now)
    ordered = sort_by_urgency(items, now)
    dot = dominant_urgency_dot(ordered, now)
    return {
        "items": [
            {
                "item": asdict(entry.item),
                "urgency": asdict(entry.urgency),
                "label": format_expiry(entry.item.expiry_date, now),
            }
            for entry in with_urgency(ordered, now)
        ],
        "dominant": {"level": dot[0], "dot_color": dot[1]} if dot else None,
    }


@router.get("/reports/waste", dependencies=[Depends(require_token)], tags=["reports"])
async def waste_report(
    request: Request,
    granularity: Granularity = Granularity.WEEK,
    location: str = ALL_LOCATIONS,
    search: str = "",
    category: list[str] | None = Query(default=None),
) -> dict[str, object]:
    """Return the waste report for the current period."""
    container: AppContainer = request.app.state.container
    report = container.waste_report_service.build_report(
        user_id=container.settings.owner_user_id,
        granularity=granularity,
        filters=WasteFilters(location=location, search=search, categories=category),
    )
    return asdict(report)


@router.post(
    "/notifications/initialize",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def initialize_notifications(request: Request) -> dict[str, object]:
    """Reload preferences and request delivery permission."""
    container: AppContainer = request.app.state.container
    granted = await container.notification_service.initialize()
    return {"permission_granted": granted}


@router.post(
    "/notifications/schedule",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def schedule_notifications(request: Request) -> dict[str, object]:
    """Replace pending reminders based on the current inventory."""
    container: AppContainer = request.app.state.container
    summary = await container.notification_service.schedule_for_inventory()
    return asdict(summary)


@router.post(
    "/notifications/actions",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def notification_action(
    body: NotificationActionRequest, request: Request
) -> dict[str, object]:
    """Apply an action chosen on a notification."""
    container: AppContainer = request.app.state.container
    outcome = container.notification_service.handle_notification_action(
        body.action_id, body.payload
    )
    return {
        "action": outcome.action.value,
        "handled": outcome.handled,
        "route": outcome.route,
    }


@router.get(
    "/notifications/settings",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def get_notification_settings(request: Request) -> dict[str, object]:
    """Return the current notification settings."""
    container: AppContainer = request.app.state.container
    return container.notification_service.get_settings().model_dump(mode="json")


@router.patch(
    "/notifications/settings",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def update_notification_settings(
    body: NotificationSettingsUpdate, request: Request
) -> dict[str, object]:
    """Merge and persist notification settings."""
    container: AppContainer = request.app.state.container
    updated = container.notification_service.update_settings(body.changes())
    return updated.model_dump(mode="json")


@router.get(
    "/notifications/stats",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def notification_stats(request: Request) -> dict[str, object]:
    """Return scheduler state and counts from the last run."""
    container: AppContainer = request.app.state.container
    return container.notification_service.get_notification_stats()


@router.post(
    "/notifications/dispatch",
    dependencies=[Depends(require_token)],
    tags=["notifications"],
)
async def dispatch_notifications(request: Request) -> dict[str, object]:
    """Deliver stored notifications that are due."""
    container: AppContainer = request.app.state.container
    delivered = await container.notification_platform.deliver_due()
    return {"delivered": delivered}
