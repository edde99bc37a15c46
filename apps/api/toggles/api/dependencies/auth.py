"""
Authentication dependencies.

The dispatch route verifies the credential itself because ``health-check``
is answered without one:

    from toggles.api.dependencies.auth import Auth

    @router.post("/actions")
    async def handler(auth: Auth, authorization: str | None = Header(default=None)):
        user = auth.verify(authorization)
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from toggles.services.auth import AuthService


@lru_cache
def get_auth_service() -> AuthService:
    """Get auth service configured from settings."""
    return AuthService()


Auth = Annotated[AuthService, Depends(get_auth_service)]
