"""
Budgets API Routes

Budget CRUD, utilization alerts and totals.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import BudgetIn

router = APIRouter(prefix="/budgets", tags=["budgets"])

RESOURCE = "budgets"


class BudgetOut(BaseModel):
    id: str
    category_id: str | None = None
    category_name: str | None = None
    budget_limit: float | None = None
    spent: float | None = None
    period: str | None = None
    month: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BudgetAlertOut(BudgetOut):
    utilization_percent: float


class BudgetAlertsResponse(DataResponse[list[BudgetAlertOut]]):
    threshold: float


class BudgetStats(BaseModel):
    total_budgets: int
    active_budgets: int
    total_limit: float
    total_spent: float
    utilization_percent: float


@router.get("", response_model=ReadResponse[list[BudgetOut]])
def list_budgets(
    period: str | None = Query(None),
    month: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.budgets.list({"period": period, "month": month, "is_active": is_active})
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/alerts/current", response_model=BudgetAlertsResponse)
def budget_alerts(
    threshold: float | None = Query(None, ge=0),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Active budgets whose spent/limit ratio is at or above threshold.

    Args:
        threshold: Ratio, default from BUDGET_ALERT_THRESHOLD (0.8)
        user: Authenticated user
        services: Application services

    Returns:
        {success, data: [budget + utilization_percent], threshold}
    """
    if threshold is None:
        threshold = services.settings.budget_alert_threshold
    return ok(services.budgets.get_alerts(threshold), threshold=threshold)


@router.get("/stats/summary", response_model=DataResponse[BudgetStats])
def budget_stats(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.budgets.get_stats())


@router.get("/{budget_id}", response_model=ReadResponse[BudgetOut])
def get_budget(
    budget_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.budgets.get_by_id(budget_id), services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[BudgetOut])
def create_budget(
    body: BudgetIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.budgets.create(data, user.id))


@router.put("/{budget_id}", response_model=DataResponse[BudgetOut])
def update_budget(
    budget_id: str,
    body: BudgetIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.budgets.update(budget_id, patch, user.id))


@router.delete("/{budget_id}", response_model=MessageResponse)
def delete_budget(
    budget_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.budgets.delete(budget_id)
