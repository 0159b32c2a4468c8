"""
Auth API Routes

Login, token refresh, logout and account registration.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel

from ..auth import User, get_current_user, require_admin
from ..deps import Services, get_services
from ..responses import DataResponse, MessageResponse, ok
from ..schemas import LoginIn, RefreshIn, RegisterIn

router = APIRouter(prefix="/auth", tags=["auth"])


class UserOut(BaseModel):
    """Account as exposed over the API; never carries the password hash."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    is_active: bool | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenPair(BaseModel):
    token: str
    refresh_token: str


class LoginOut(TokenPair):
    user: UserOut


@router.post("/login", response_model=DataResponse[LoginOut])
def login(
    body: LoginIn,
    request: Request,
    services: Services = Depends(get_services),
) -> dict:
    """Exchange email and password for an access and refresh token.

    Returns:
        {success, data: {token, refresh_token, user}}
    """
    result = services.users.login(
        body.email,
        body.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return ok(result)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=DataResponse[UserOut])
def register(
    body: RegisterIn,
    user: User = Depends(require_admin),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.users.register(body.to_patch()))


@router.post("/refresh", response_model=DataResponse[TokenPair])
def refresh(
    body: RefreshIn,
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.users.refresh(body.refresh_token or ""))


@router.post("/logout", response_model=MessageResponse)
def logout(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return services.users.logout(user.session_id)


@router.get("/me", response_model=DataResponse[UserOut])
def me(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    return ok(services.users.get_profile(user.id))
