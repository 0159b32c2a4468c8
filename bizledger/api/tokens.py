"""
Access Tokens

HS256 JWTs carrying the user id, role and login session id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .errors import AuthError


class TokenCodec:
    """Signs and verifies access tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        """Initialize the codec.

        Args:
            secret: HMAC signing secret
            algorithm: JWT algorithm
            expires_minutes: Access token lifetime
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user: dict, session_id: str) -> str:
        """Sign an access token for a user session."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user["id"]),
            "email": user["email"],
            "role": user.get("role") or "user",
            "sid": session_id,
            "type": "access",
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Raises:
            AuthError: Expired, malformed or wrongly signed token
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

        if claims.get("type") != "access":
            raise AuthError("Invalid token")
        return claims
