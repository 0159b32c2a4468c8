"""
Sessions API Routes

Active login sessions; revocation is admin-only.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..responses import DataResponse, MessageResponse, ok

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionOut(BaseModel):
    id: str
    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RevokeAllResponse(MessageResponse):
    count: int


@router.get("", response_model=DataResponse[list[SessionOut]])
def list_sessions(
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.users.list_sessions())


@router.get("/user", response_model=DataResponse[list[SessionOut]])
def list_my_sessions(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.users.list_sessions(user.id))


@router.delete("/{session_id}", response_model=MessageResponse)
def revoke_session(
    session_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.users.revoke_session(session_id)


@router.delete("/user/{user_id}/all", response_model=RevokeAllResponse)
def revoke_user_sessions(
    user_id: str,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return services.users.revoke_user_sessions(user_id)
