"""Mock verification notifier for development and testing.

Logs the verification link instead of sending mail and keeps the messages
for inspection.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.config import Settings
from services.campus_identity_service.implementations.notifier_smtp_impl import (
    build_verification_link,
)
from services.campus_identity_service.protocols import NotificationResult, VerificationNotifier

logger = create_service_logger("campus_identity_service.notifier_mock")


class MockVerificationNotifier(VerificationNotifier):
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.sent_messages: list[dict[str, Any]] = []

    async def send_verification_message(
        self, destination_email: str, account_id: str, display_name: str
    ) -> NotificationResult:
        link = build_verification_link(self.settings.VERIFICATION_LINK_BASE_URL, account_id)
        self.sent_messages.append(
            {
                "to": destination_email,
                "account_id": account_id,
                "display_name": display_name,
                "verification_link": link,
                "sent_at": datetime.now(UTC),
            }
        )
        logger.info(
            "Mock verification email",
            extra={"to": destination_email, "verification_link": link},
        )
        return NotificationResult(success=True)
