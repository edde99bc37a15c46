"""Audit log service for tracking configuration changes."""

from typing import Any, Optional

import structlog

from toggles.core.config import settings
from toggles.core.errors import InvalidShapeError
from toggles.core.interfaces.storage import DocumentStore
from toggles.utils.storage import (
    feature_log_key,
    group_log_key,
    load_document,
    save_document,
)
from toggles.utils.timezone import to_iso8601, utc_now

logger = structlog.get_logger()


def create_log_entry(user_email: str, action: str, **details: Any) -> dict[str, Any]:
    """
    Build one audit entry.

    Extra keyword arguments (segment, value, rollout, order) are copied into
    the entry verbatim.
    """
    if not user_email:
        raise InvalidShapeError("User email is required", field="user", value=user_email)

    return {
        "user": user_email,
        "action": action,
        "timestamp": to_iso8601(utc_now()),
        **details,
    }


class AuditLogService:
    """
    Append-only audit logs stored as JSON documents.

    Each log keeps only the newest ``log_limit`` entries. Appends are an
    unguarded read-modify-write, so two concurrent appends to the same log
    can lose one entry.
    """

    def __init__(self, store: DocumentStore, log_limit: Optional[int] = None):
        self.store = store
        self.log_limit = log_limit or settings.audit.log_limit

    async def append(self, key: str, entry: dict[str, Any]) -> list[dict[str, Any]]:
        """Append an entry and trim the log to the retention window."""
        logs = await self.entries(key)
        logs.append(entry)

        if len(logs) > self.log_limit:
            logs = logs[len(logs) - self.log_limit:]

        await save_document(self.store, key, logs)

        logger.info(
            "Audit log appended",
            key=key,
            action=entry.get("action"),
            user=entry.get("user"),
            size=len(logs),
        )

        return logs

    async def entries(self, key: str) -> list[dict[str, Any]]:
        """Read a log, oldest entry first."""
        return await load_document(self.store, key)

    # ============================================================
    # TYPED HELPERS
    # ============================================================

    async def log_group_action(
        self,
        platform: str,
        group_id: str,
        user_email: str,
        action: str,
    ) -> None:
        """Log a group creation or deletion."""
        entry = create_log_entry(user_email, action)
        await self.append(group_log_key(platform, group_id), entry)

    async def log_feature_action(
        self,
        platform: str,
        group_id: str,
        feature_id: str,
        user_email: str,
        action: str,
        **details: Any,
    ) -> None:
        """Log a feature change; details describe what changed."""
        entry = create_log_entry(user_email, action, **details)
        await self.append(feature_log_key(platform, group_id, feature_id), entry)
