"""SMTP delivery of verification emails.

Builds the verification link from the account id, renders the jinja2
template and sends a multipart message through aiosmtplib. Every failure is
reported as a NotificationResult; callers decide whether it matters.
"""

from __future__ import annotations

from email.message import EmailMessage

import aiosmtplib
from uapmp_service_libs.logging_utils import create_service_logger

from services.campus_identity_service.config import Settings
from services.campus_identity_service.implementations.template_renderer_impl import (
    JinjaTemplateRenderer,
)
from services.campus_identity_service.protocols import NotificationResult, VerificationNotifier

logger = create_service_logger("campus_identity_service.notifier_smtp")


def build_verification_link(base_url: str, account_id: str) -> str:
    return f"{base_url.rstrip('/')}/{account_id}"


class SmtpVerificationNotifier(VerificationNotifier):
    def __init__(self, settings: Settings, renderer: JinjaTemplateRenderer) -> None:
        self.settings = settings
        self._renderer = renderer

    async def send_verification_message(
        self, destination_email: str, account_id: str, display_name: str
    ) -> NotificationResult:
        link = build_verification_link(self.settings.VERIFICATION_LINK_BASE_URL, account_id)
        rendered = await self._renderer.render(
            "verification",
            {
                "display_name": display_name,
                "verification_link": link,
                "window_hours": str(self.settings.VERIFICATION_WINDOW_HOURS),
                "product_name": self.settings.DEFAULT_FROM_NAME,
            },
        )

        msg = EmailMessage()
        msg["From"] = f"{self.settings.DEFAULT_FROM_NAME} <{self.settings.DEFAULT_FROM_EMAIL}>"
        msg["To"] = destination_email
        msg["Subject"] = rendered.subject
        msg.set_content(rendered.text_content, charset="utf-8")
        msg.add_alternative(rendered.html_content, subtype="html", charset="utf-8")

        password = self.settings.SMTP_PASSWORD
        try:
            errors, response = await aiosmtplib.send(
                msg,
                hostname=self.settings.SMTP_HOST,
                port=self.settings.SMTP_PORT,
                start_tls=self.settings.SMTP_USE_TLS,
                username=self.settings.SMTP_USERNAME,
                password=password.get_secret_value() if password else None,
                timeout=self.settings.NOTIFIER_TIMEOUT_SECONDS,
            )
        except aiosmtplib.SMTPException as e:
            logger.error(f"SMTP send failed to {destination_email}: {e}", exc_info=True)
            return NotificationResult(success=False, error_message=f"SMTP error: {e}")

        if errors:
            details = "; ".join(f"{addr}: {error}" for addr, error in errors.items())
            logger.error(f"SMTP partial send failure to {destination_email}: {details}")
            return NotificationResult(success=False, error_message=details)

        logger.info(
            "Verification email sent via SMTP",
            extra={
                "account_id": account_id,
                "to": destination_email,
                "smtp_host": self.settings.SMTP_HOST,
                "smtp_response": response,
            },
        )
        return NotificationResult(success=True)
