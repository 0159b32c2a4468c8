"""
Petty Expenses API Routes

The one resource regular users may write. Non-admins can only change
or remove expenses they recorded themselves.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import PettyExpenseIn

router = APIRouter(prefix="/petty-expenses", tags=["petty-expenses"])

RESOURCE = "petty_expenses"


class PettyExpenseOut(BaseModel):
    id: str
    description: str | None = None
    amount: float | None = None
    category: str | None = None
    expense_date: date | None = None
    vendor: str | None = None
    receipt_number: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class MonthlySummary(BaseModel):
    """Petty cash spent in one calendar month."""

    month: str
    total: float
    count: int
    by_category: list[CategoryTotal]


@router.get("", response_model=ReadResponse[list[PettyExpenseOut]])
def list_petty_expenses(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    category: str | None = Query(None),
    created_by: str | None = Query(None, alias="createdBy"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.petty_expenses.list({
        "start_date": start_date,
        "end_date": end_date,
        "category": category,
        "created_by": created_by,
    })
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/summary/monthly", response_model=DataResponse[MonthlySummary])
def monthly_summary(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=1900),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Totals for one calendar month (defaults to the current month).

    Args:
        month: 1-12
        year: Four-digit year
        user: Authenticated user
        services: Application services

    Returns:
        {success, data: {month, total, count, by_category}}
    """
    today = date.today()
    return ok(services.petty_expenses.get_monthly_summary(month or today.month, year or today.year))


@router.get("/{expense_id}", response_model=ReadResponse[PettyExpenseOut])
def get_petty_expense(
    expense_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    row = services.petty_expenses.get_by_id(expense_id)
    return with_permissions(row, services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[PettyExpenseOut])
def create_petty_expense(
    body: PettyExpenseIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.petty_expenses.create(data, user.id))


@router.put("/{expense_id}", response_model=DataResponse[PettyExpenseOut])
def update_petty_expense(
    expense_id: str,
    body: PettyExpenseIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    expense = services.petty_expenses.update(
        expense_id, patch, user.id, restrict_to_owner=not user.is_admin
    )
    return ok(expense)


@router.delete("/{expense_id}", response_model=MessageResponse)
def delete_petty_expense(
    expense_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return services.petty_expenses.delete(expense_id, user.id, restrict_to_owner=not user.is_admin)
