"""
Users Service

User accounts, password checks and login sessions. Access and refresh
tokens are stored as SHA-256 digests, never in clear.
"""

import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta

import bcrypt

from ..api.errors import AuthError, ConflictError, NotFoundError, ValidationError
from .base import BaseService, require_choice, require_text

logger = logging.getLogger(__name__)

USER_ROLES = ("admin", "user")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def public_user(user: dict) -> dict:
    """User row without credential columns."""
    return {k: v for k, v in user.items() if k != "password_hash"}


class UsersService(BaseService):
    """Accounts and sessions."""

    table = "users"
    entity_name = "User"
    sessions_table = "sessions"

    def __init__(self, store, tokens, refresh_expires_days: int = 7, cache=None):
        """Initialize the service.

        Args:
            store: Record store
            tokens: Access token codec (issue/decode)
            refresh_expires_days: Lifetime of a login session
            cache: Unused; accepted for a uniform constructor
        """
        super().__init__(store, cache)
        self.tokens = tokens
        self.refresh_expires_days = refresh_expires_days

    def find(self, user_id: str) -> dict | None:
        return self.store.get(self.table, user_id)

    def get_profile(self, user_id: str) -> dict:
        return public_user(self._require(user_id))

    def get_by_email(self, email: str) -> dict | None:
        rows = self.store.select(self.table, {"email": email.strip().lower()}, limit=1)
        return rows[0] if rows else None

    def register(self, data: dict) -> dict:
        """Create a user account.

        Raises:
            ValidationError: Missing email, short password, unknown role
            ConflictError: Email already registered
        """
        email = require_text(data, "email", "Email").lower()
        if "@" not in email:
            raise ValidationError("Invalid email", {"field": "email"})

        password = data.get("password") or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                {"field": "password"},
            )

        if self.get_by_email(email):
            raise ConflictError("User with this email already exists")

        row = {
            "email": email,
            "password_hash": hash_password(password),
            "first_name": data.get("first_name"),
            "last_name": data.get("last_name"),
            "role": require_choice(data.get("role") or "user", USER_ROLES, "role"),
            "is_active": True,
        }
        user = self.store.insert(self.table, row)[0]

        logger.info("User %s registered with role %s", user["id"], user["role"])
        return public_user(user)

    def ensure_admin(self, email: str, password: str) -> dict:
        """Create the admin account, or reset its password if it exists."""
        existing = self.get_by_email(email)
        if existing:
            user = self.store.update(
                self.table,
                self._stamp({"password_hash": hash_password(password), "role": "admin", "is_active": True}),
                {"id": existing["id"]},
            )[0]
            logger.info("Admin %s password reset", email)
            return public_user(user)

        return self.register({"email": email, "password": password, "role": "admin",
                              "first_name": "Admin", "last_name": "User"})

    def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> dict:
        """Check credentials and open a session.

        Returns:
            {token, refresh_token, user}

        Raises:
            AuthError: Unknown email, wrong password or inactive account
        """
        user = self.get_by_email(email or "")
        if not user or not verify_password(password or "", user.get("password_hash")):
            logger.warning("Failed login for %s", email)
            raise AuthError("Invalid email or password")
        if not user.get("is_active"):
            raise AuthError("Account is disabled")

        session_id = str(uuid.uuid4())
        token = self.tokens.issue(user, session_id)
        refresh_token = secrets.token_urlsafe(48)
        now = datetime.now()

        self.store.insert(self.sessions_table, {
            "id": session_id,
            "user_id": user["id"],
            "token": token_digest(token),
            "refresh_token": token_digest(refresh_token),
            "ip_address": ip_address,
            "user_agent": user_agent,
            "expires_at": now + timedelta(days=self.refresh_expires_days),
            "is_active": True,
        })
        self.store.update(self.table, {"last_login_at": now}, {"id": user["id"]})

        logger.info("User %s logged in", user["id"])
        return {
            "token": token,
            "refresh_token": refresh_token,
            "user": public_user({**user, "last_login_at": now}),
        }

    def refresh(self, refresh_token: str) -> dict:
        """Issue a new access token for a live session.

        Raises:
            AuthError: Unknown, revoked or expired refresh token
        """
        rows = self.store.select(
            self.sessions_table,
            {"refresh_token": token_digest(refresh_token or ""), "is_active": True},
            limit=1,
        )
        if not rows:
            raise AuthError("Invalid refresh token")

        session = rows[0]
        if session["expires_at"] <= datetime.now():
            self.store.update(self.sessions_table, {"is_active": False}, {"id": session["id"]})
            raise AuthError("Refresh token expired")

        user = self.store.get(self.table, session["user_id"])
        if not user or not user.get("is_active"):
            raise AuthError("Account is disabled")

        token = self.tokens.issue(user, str(session["id"]))
        self.store.update(
            self.sessions_table,
            self._stamp({"token": token_digest(token)}),
            {"id": session["id"]},
        )
        return {"token": token, "refresh_token": refresh_token}

    def get_active_session(self, session_id: str) -> dict | None:
        session = self.store.get(self.sessions_table, session_id)
        if not session or not session.get("is_active"):
            return None
        if session["expires_at"] <= datetime.now():
            return None
        return session

    def logout(self, session_id: str) -> dict:
        self.store.update(self.sessions_table, self._stamp({"is_active": False}), {"id": session_id})
        logger.info("Session %s closed", session_id)
        return {"success": True, "message": "Logged out successfully"}

    @staticmethod
    def _public_session(session: dict) -> dict:
        return {k: v for k, v in session.items() if k not in ("token", "refresh_token")}

    def list_sessions(self, user_id: str | None = None) -> list[dict]:
        where = {"is_active": True}
        if user_id:
            where["user_id"] = user_id
        rows = self.store.select(self.sessions_table, where, order_by=["-created_at"])
        return [self._public_session(s) for s in rows]

    def revoke_session(self, session_id: str) -> dict:
        if not self.store.get(self.sessions_table, session_id):
            raise NotFoundError("Session not found")
        return self.logout(session_id)

    def revoke_user_sessions(self, user_id: str) -> dict:
        revoked = self.store.update(
            self.sessions_table,
            self._stamp({"is_active": False}),
            {"user_id": user_id, "is_active": True},
        )
        logger.info("Revoked %d sessions for user %s", len(revoked), user_id)
        return {"success": True, "message": f"Revoked {len(revoked)} sessions", "count": len(revoked)}
