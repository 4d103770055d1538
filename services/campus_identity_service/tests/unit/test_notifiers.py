"""Unit tests for the verification notifiers and the email template."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest
from uapmp_service_libs.error_handling import UapmpError

from services.campus_identity_service.config import Settings
from services.campus_identity_service.implementations.notifier_mock_impl import (
    MockVerificationNotifier,
)
from services.campus_identity_service.implementations.notifier_smtp_impl import (
    SmtpVerificationNotifier,
    build_verification_link,
)
from services.campus_identity_service.implementations.template_renderer_impl import (
    JinjaTemplateRenderer,
)

ACCOUNT_ID = "6f1c2a9e-8a51-4c1b-9d34-3f2d9c7e1a10"


def test_verification_link_joins_base_and_account_id() -> None:
    assert (
        build_verification_link("http://localhost:8000/v1/auth/verify/", ACCOUNT_ID)
        == f"http://localhost:8000/v1/auth/verify/{ACCOUNT_ID}"
    )


class TestTemplateRenderer:
    async def test_renders_subject_link_and_text(self) -> None:
        renderer = JinjaTemplateRenderer()

        rendered = await renderer.render(
            "verification",
            {
                "display_name": "Dr. Ahmed <Hassan>",
                "verification_link": f"http://x/verify/{ACCOUNT_ID}",
                "window_hours": "24",
                "product_name": "UAPMP",
            },
        )

        assert rendered.subject == "Verify your UAPMP account"
        assert f"http://x/verify/{ACCOUNT_ID}" in rendered.html_content
        assert "&lt;Hassan&gt;" in rendered.html_content
        assert "<" not in rendered.text_content
        assert "24 hours" in rendered.text_content

    async def test_unknown_template_is_validation_error(self) -> None:
        with pytest.raises(UapmpError) as exc_info:
            await JinjaTemplateRenderer().render("password_reset", {})

        assert exc_info.value.error_code == "VALIDATION_ERROR"


class TestMockNotifier:
    async def test_records_messages(self, test_settings: Settings) -> None:
        notifier = MockVerificationNotifier(test_settings)

        result = await notifier.send_verification_message(
            "ahmed.hassan@eng.cu.edu.eg", ACCOUNT_ID, "Dr. Ahmed"
        )

        assert result.success
        assert notifier.sent_messages[0]["verification_link"].endswith(ACCOUNT_ID)


class TestSmtpNotifier:
    @pytest.fixture
    def smtp_settings(self, test_settings: Settings) -> Settings:
        return test_settings.model_copy(update={"NOTIFIER": "smtp", "SMTP_HOST": "mail.test"})

    async def test_sends_multipart_message(self, smtp_settings: Settings) -> None:
        notifier = SmtpVerificationNotifier(smtp_settings, JinjaTemplateRenderer())

        with patch.object(aiosmtplib, "send", AsyncMock(return_value=({}, "OK"))) as send:
            result = await notifier.send_verification_message(
                "ahmed.hassan@eng.cu.edu.eg", ACCOUNT_ID, "Dr. Ahmed"
            )

        assert result.success
        message = send.await_args.args[0]
        assert message["To"] == "ahmed.hassan@eng.cu.edu.eg"
        assert message["Subject"] == "Verify your UAPMP account"
        assert message.is_multipart()
        assert send.await_args.kwargs["hostname"] == "mail.test"
        assert send.await_args.kwargs["password"] is None

    async def test_smtp_error_is_reported(self, smtp_settings: Settings) -> None:
        notifier = SmtpVerificationNotifier(smtp_settings, JinjaTemplateRenderer())

        with patch.object(
            aiosmtplib, "send", AsyncMock(side_effect=aiosmtplib.SMTPConnectError("refused"))
        ):
            result = await notifier.send_verification_message(
                "ahmed.hassan@eng.cu.edu.eg", ACCOUNT_ID, "Dr. Ahmed"
            )

        assert not result.success
        assert "refused" in (result.error_message or "")

    async def test_rejected_recipient_is_reported(self, smtp_settings: Settings) -> None:
        notifier = SmtpVerificationNotifier(smtp_settings, JinjaTemplateRenderer())
        rejected = {"ahmed.hassan@eng.cu.edu.eg": aiosmtplib.SMTPResponse(550, "no mailbox")}

        with patch.object(aiosmtplib, "send", AsyncMock(return_value=(rejected, "OK"))):
            result = await notifier.send_verification_message(
                "ahmed.hassan@eng.cu.edu.eg", ACCOUNT_ID, "Dr. Ahmed"
            )

        assert not result.success
