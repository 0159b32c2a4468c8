"""
Authentication Module

Bearer JWT authentication backed by server-side sessions.
"""

import logging

from fastapi import Depends, Header
from pydantic import BaseModel

from .deps import Services, get_services
from .errors import AuthError, PermissionDenied

logger = logging.getLogger(__name__)


class User(BaseModel):
    """Authenticated user model."""

    id: str
    email: str
    role: str
    first_name: str | None = None
    last_name: str | None = None
    session_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise AuthError("Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Authorization header must be 'Bearer <token>'")
    return token.strip()


def get_current_user(
    authorization: str | None = Header(None),
    services: Services = Depends(get_services),
) -> User:
    """Get current authenticated user from the Bearer token.

    Args:
        authorization: Authorization header
        services: Application services

    Returns:
        Authenticated User

    Raises:
        AuthError: Missing/invalid token, or its session is no longer active
    """
    claims = services.tokens.decode(bearer_token(authorization))

    session_id = claims.get("sid")
    if not session_id or not services.users.get_active_session(session_id):
        raise AuthError("Session expired or revoked")

    user = services.users.find(claims["sub"])
    if not user or not user.get("is_active"):
        raise AuthError("Account is disabled")

    return User(
        id=str(user["id"]),
        email=user["email"],
        role=user.get("role") or "user",
        first_name=user.get("first_name"),
        last_name=user.get("last_name"),
        session_id=str(session_id),
    )


def authorize(*roles: str):
    """Dependency factory for role checks.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency function
    """
    def check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning("User %s (%s) denied, requires %s", user.id, user.role, roles)
            raise PermissionDenied("Insufficient permissions")
        return user

    return check_role


require_admin = authorize("admin")
