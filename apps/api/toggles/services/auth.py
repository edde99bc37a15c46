"""
Authentication service.

Credentials are HS256 JWTs carrying the acting user in a ``user`` claim:

    {"user": {"email": "ops@example.com"}, "exp": 1735689600}
"""

from datetime import timedelta
from dataclasses import dataclass
from typing import Optional

from jose import JWTError, jwt

from toggles.core.config import settings
from toggles.core.errors import UnauthenticatedError
from toggles.utils.timezone import utc_now


@dataclass
class Identity:
    """Verified caller."""
    user_email: str


class AuthService:
    """Verifies bearer credentials and mints tokens."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        self.secret_key = secret_key or settings.auth.secret_key
        self.algorithm = algorithm or settings.auth.algorithm

    def create_access_token(
        self,
        email: str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """Create JWT access token for a user email."""
        expire = utc_now() + (
            expires_in or timedelta(minutes=settings.auth.access_token_expire_minutes)
        )
        payload = {
            "user": {"email": email},
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, credential: Optional[str]) -> Identity:
        """
        Verify an ``Authorization`` header value.

        Raises:
            UnauthenticatedError: missing or malformed header, bad signature,
                expired token, or no user email in the token
        """
        if not credential or not credential.startswith("Bearer "):
            raise UnauthenticatedError(
                "Authorization header missing or malformed",
                field="Authorization",
            )

        token = credential.split(" ", 1)[1].strip()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise UnauthenticatedError(f"Invalid token: {e}", field="Authorization")

        user = payload.get("user")
        email = user.get("email") if isinstance(user, dict) else None
        if not email:
            raise UnauthenticatedError("User not found in token", field="Authorization")

        return Identity(user_email=email)
