"""
Cash Transactions API Routes
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import CashTransactionIn

router = APIRouter(prefix="/cash-transactions", tags=["cash-transactions"])

RESOURCE = "cash_transactions"


class CashTransactionOut(BaseModel):
    id: str
    transaction_date: date | None = None
    description: str | None = None
    amount: float | None = None
    transaction_type: str | None = None
    category: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CashStats(BaseModel):
    total_income: float
    total_expense: float
    net_balance: float
    transaction_count: int


@router.get("", response_model=ReadResponse[list[CashTransactionOut]])
def list_transactions(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    transaction_type: str | None = Query(None, alias="type"),
    category: str | None = Query(None),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    rows = services.cash_transactions.list({
        "start_date": start_date,
        "end_date": end_date,
        "transaction_type": transaction_type,
        "category": category,
    })
    return with_permissions(rows, services.policy, user.role, RESOURCE)


@router.get("/stats/summary", response_model=DataResponse[CashStats])
def transaction_stats(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.cash_transactions.get_stats(start_date, end_date))


@router.get("/{transaction_id}", response_model=ReadResponse[CashTransactionOut])
def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    row = services.cash_transactions.get_by_id(transaction_id)
    return with_permissions(row, services.policy, user.role, RESOURCE)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[CashTransactionOut])
def create_transaction(
    body: CashTransactionIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.cash_transactions.create(data, user.id))


@router.put("/{transaction_id}", response_model=DataResponse[CashTransactionOut])
def update_transaction(
    transaction_id: str,
    body: CashTransactionIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.cash_transactions.update(transaction_id, patch, user.id))


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.cash_transactions.delete(transaction_id)
