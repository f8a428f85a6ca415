"""
Audit Trail

Append-only record of admin actions and address changes, keyed by the
acting user. Writing the record never fails the request it describes.
"""
import json
import logging
from typing import Any, Dict, Optional
from atrium.modules.database import database

logger = logging.getLogger("atrium.audit")

_INSERT_EVENT = """
    INSERT INTO audit_logs (user_id, action, resource_type, resource_id, details)
    VALUES (:user_id, :action, :resource_type, :resource_id, :details)
"""


class AuditManager:
    """Writes one audit_logs row per mutating call."""

    async def log_event(
        self,
        user_id: str,
        action: str,
        resource_type: str,
        resource_id: Any,
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Returns False when the row could not be written."""
        values = {
            "user_id": user_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "details": json.dumps(details or {}, default=str),
        }
        try:
            await database.execute(_INSERT_EVENT, values)
        except Exception as e:
            logger.critical(f"Audit write failed for {action} {resource_type}:{resource_id} by {user_id}: {e}")
            return False

        logger.info(f"AUDIT [{user_id}] {action} {resource_type}:{resource_id}")
        return True


audit_manager = AuditManager()
