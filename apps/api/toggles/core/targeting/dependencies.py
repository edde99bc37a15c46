"""
FastAPI dependencies for the toggle service.

Usage:
    from toggles.core.targeting.dependencies import Toggles

    @router.post("/actions")
    async def dispatch(service: Toggles):
        await service.add_platform(["web"])
"""

from typing import Annotated

from fastapi import Depends

from toggles.core.interfaces.storage import DocumentStore
from toggles.services.audit import AuditLogService
from toggles.utils.storage import get_store

from .service import ToggleService


async def get_toggle_service(
    store: DocumentStore = Depends(get_store),
) -> ToggleService:
    """Get toggle service bound to the configured document store."""
    return ToggleService(store, audit=AuditLogService(store))


# Type alias for cleaner injection
Toggles = Annotated[ToggleService, Depends(get_toggle_service)]
