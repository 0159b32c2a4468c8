"""
Reminders API Routes
"""

from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import ReminderIn

router = APIRouter(prefix="/reminders", tags=["reminders"])

RESOURCE = "reminders"


class ReminderOut(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    reminder_date: date | None = None
    reminder_time: time | None = None
    type: str | None = None
    related_id: str | None = None
    notification_methods: list[str] | None = None
    recipients: list[str] | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@router.get("", response_model=ReadResponse[list[ReminderOut]])
def list_reminders(
    reminder_type: str | None = Query(None, alias="type"),
    is_active: bool | None = Query(None, alias="isActive"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.reminders.list({
        "type": reminder_type,
        "is_active": is_active,
        "start_date": start_date,
        "end_date": end_date,
    })
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/upcoming/today", response_model=DataResponse[list[ReminderOut]])
def upcoming_reminders(
    days: int = Query(7, ge=0, le=365),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Active reminders from today through the next `days` days."""
    return ok(services.reminders.get_upcoming(days))


@router.get("/today", response_model=DataResponse[list[ReminderOut]])
def todays_reminders(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.reminders.get_today())


@router.get("/{reminder_id}", response_model=ReadResponse[ReminderOut])
def get_reminder(
    reminder_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.reminders.get_by_id(reminder_id), services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[ReminderOut])
def create_reminder(
    body: ReminderIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.reminders.create(data, user.id))


@router.put("/{reminder_id}", response_model=DataResponse[ReminderOut])
def update_reminder(
    reminder_id: str,
    body: ReminderIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.reminders.update(reminder_id, patch, user.id))


@router.delete("/{reminder_id}", response_model=MessageResponse)
def delete_reminder(
    reminder_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.reminders.delete(reminder_id)
