"""
Bills API Routes

Bill CRUD and bill statistics. Writes go through the field policy.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import BillIn

router = APIRouter(prefix="/bills", tags=["bills"])

RESOURCE = "bills"


class CardRef(BaseModel):
    card_number: str | None = None
    card_holder: str | None = None


class BillOut(BaseModel):
    """Bill row with its card and creator."""

    id: str
    bill_date: date | None = None
    vendor: str | None = None
    amount: float | None = None
    description: str | None = None
    category_id: str | None = None
    attachment_url: str | None = None
    attachment_type: str | None = None
    card_id: str | None = None
    status: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    card: CardRef | None = None
    created_by_email: str | None = None


class BillStats(BaseModel):
    total_bills: int
    total_amount: float
    average_amount: float
    pending_count: int
    approved_count: int
    paid_count: int
    rejected_count: int


class BillListResponse(ReadResponse[list[BillOut]]):
    stats: BillStats


@router.get("", response_model=BillListResponse)
def list_bills(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    bill_status: str | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """List bills with card details and summary stats.

    Args:
        start_date: Earliest bill date
        end_date: Latest bill date
        bill_status: Filter by status
        user: Authenticated user
        services: Application services

    Returns:
        {success, data, stats, _metadata}
    """
    bills = services.bills.list({"start_date": start_date, "end_date": end_date, "status": bill_status})
    stats = services.bills.get_stats(start_date, end_date)
    return with_permissions(bills, services.policy, user.role, RESOURCE, stats=stats)


@router.get("/stats/summary", response_model=DataResponse[BillStats])
def bill_stats(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.bills.get_stats(start_date, end_date))


@router.get("/{bill_id}", response_model=ReadResponse[BillOut])
def get_bill(
    bill_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.bills.get_by_id(bill_id), services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[BillOut])
def create_bill(
    body: BillIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Create a bill; a linked card's balance grows by the bill amount."""
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.bills.create(data, user.id))


@router.put("/{bill_id}", response_model=DataResponse[BillOut])
def update_bill(
    bill_id: str,
    body: BillIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.bills.update(bill_id, patch, user.id))


@router.delete("/{bill_id}", response_model=MessageResponse)
def delete_bill(
    bill_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.bills.delete(bill_id)
