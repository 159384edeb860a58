"""
Audit Service - structured audit trail for admin team changes.

Entries are written as JSON to the ``salon_admin.audit`` logger. Logging is
fire-and-forget: a failure to audit never blocks the admin action itself.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("salon_admin.audit")


class AuditService:
    """Writes admin actions and permission denials in an auditable format."""

    async def log_admin_action(
        self,
        *,
        actor_id: int | str | None,
        action: str,
        target_type: str,
        target_id: int | str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """
        Log an admin action in structured JSON format.

        Never raises to the caller.

        Args:
            actor_id: ID of the admin performing the action
            action: Action identifier (e.g., "admins.create")
            target_type: Type of target entity (e.g., "admin")
            target_id: ID of the target entity
            payload: Optional dict with action details
        """
        self._emit(
            action,
            {
                "actor_id": None if actor_id is None else str(actor_id),
                "action": action,
                "target_type": target_type,
                "target_id": str(target_id),
                "payload": payload or {},
            },
        )

    async def log_permission_denied(
        self,
        *,
        actor_id: int | str | None,
        required: str | None,
        method: str,
        path: str,
    ) -> None:
        self._emit(
            "permission_denied",
            {
                "actor_id": None if actor_id is None else str(actor_id),
                "action": "permission_denied",
                "target_type": "admin_permission",
                "target_id": required or "",
                "payload": {"request_method": method, "request_path": path},
            },
        )

    def _emit(self, action: str, entry: dict[str, Any]) -> None:
        try:
            entry["timestamp"] = datetime.now(timezone.utc).isoformat()
            logger.info(
                "AUDIT: %s",
                json.dumps(entry, ensure_ascii=False, default=str),
                extra={"audit_entry": entry},
            )
        except Exception as e:
            # Never let audit failures block the actual operation
            logger.error(
                "Audit logging failed for action %s: %s",
                action,
                str(e),
                exc_info=True,
            )
