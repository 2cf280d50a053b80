"""
Mock customer notification sender.

In production, this would hand off to an email/SMS/push provider.
Nothing is delivered; a synthetic receipt is returned.
"""

import logging
import uuid
from typing import Any

from phone_advisor.tools.base import BaseTool, ToolResult
from phone_advisor.utils import utc_now_iso

logger = logging.getLogger(__name__)


class NotificationTool(BaseTool):
    """Send notifications to customers (email, SMS, push)."""

    name = "send_notification"
    description = "Send notifications to customers (email, SMS, push)"
    category = "communication"
    parameters = {
        "customer_id": {"type": "string", "description": "Customer ID", "required": True},
        "type": {
            "type": "string",
            "enum": ["email", "sms", "push"],
            "description": "Notification type",
            "required": True,
        },
        "message": {"type": "string", "description": "Message content", "required": True},
        "subject": {"type": "string", "description": "Subject line (for email)"},
    }

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        logger.info(
            "Sending %s notification to %s: %s",
            params.get("type"), params.get("customer_id"), params.get("message"),
        )
        return ToolResult(
            success=True,
            data={
                "notification_id": f"notif_{uuid.uuid4().hex[:12]}",
                "status": "sent",
                "delivered_at": utc_now_iso(),
            },
        )
