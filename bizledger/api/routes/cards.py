"""
Cards API Routes
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..permissions import enforce_write
from ..responses import DataMessageResponse, DataResponse, MessageResponse, ReadResponse, ok, with_permissions
from ..schemas import CardBalanceIn, CardIn

router = APIRouter(prefix="/cards", tags=["cards"])

RESOURCE = "cards"


class CardOut(BaseModel):
    id: str
    card_number: str | None = None
    card_holder: str | None = None
    card_type: str | None = None
    bank: str | None = None
    expiry_date: date | None = None
    card_limit: float | None = None
    balance: float | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CardBalanceOut(CardOut):
    """Card with its remaining limit and bill totals."""

    available_limit: float
    total_transactions: int
    total_spent: float


class CardStats(BaseModel):
    total_cards: int
    active_cards: int
    total_balance: float
    total_limit: float
    total_available: float


@router.get("", response_model=ReadResponse[list[CardOut]])
def list_cards(
    is_active: bool | None = Query(None, alias="isActive"),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    cards = services.cards.list({"is_active": is_active})
    return with_permissions(cards, services.policy, user.role, RESOURCE)


@router.get("/active", response_model=ReadResponse[list[CardOut]])
def list_active_cards(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.cards.list_active(), services.policy, user.role, RESOURCE)


@router.get("/stats/summary", response_model=DataResponse[CardStats])
def card_stats(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.cards.get_stats())


@router.get("/{card_id}", response_model=ReadResponse[CardOut])
def get_card(
    card_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return with_permissions(services.cards.get_by_id(card_id), services.policy, user.role, RESOURCE)


@router.get("/{card_id}/balance", response_model=DataResponse[CardBalanceOut])
def get_card_balance(
    card_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    """Card with available limit and totals of its bills."""
    return ok(services.cards.get_balance(card_id))


@router.put("/{card_id}/balance", response_model=DataResponse[CardOut])
def set_card_balance(
    card_id: str,
    body: CardBalanceIn,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.cards.set_balance(card_id, body.balance))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DataResponse[CardOut])
def create_card(
    body: CardIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    data = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.cards.create(data, user.id))


@router.put("/{card_id}", response_model=DataResponse[CardOut])
def update_card(
    card_id: str,
    body: CardIn,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    patch = enforce_write(services.policy, user.role, RESOURCE, body.to_patch())
    return ok(services.cards.update(card_id, patch, user.id))


@router.post("/{card_id}/deactivate", response_model=DataMessageResponse[CardOut])
def deactivate_card(
    card_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.cards.deactivate(card_id), message="Card deactivated successfully")


@router.delete("/{card_id}", response_model=MessageResponse)
def delete_card(
    card_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    """Delete a card; refused with 409 while bills reference it."""
    return services.cards.delete(card_id)
