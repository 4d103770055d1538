"""Jinja2 renderer for the verification email."""

from __future__ import annotations

import re
from pathlib import Path
from typing import NamedTuple
from uuid import uuid4

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from uapmp_service_libs.error_handling import raise_validation_error
from uapmp_service_libs.logging_utils import create_service_logger

logger = create_service_logger("campus_identity_service.template_renderer")

_SUBJECT_PATTERN = re.compile(r"<!--\s*subject:\s*(.+?)\s*-->", re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<[^>]+>")


class RenderedEmail(NamedTuple):
    subject: str
    html_content: str
    text_content: str


class JinjaTemplateRenderer:
    """Renders `<template_id>.html.j2` from the service templates directory.

    The subject line is taken from a leading `<!-- subject: ... -->` comment.
    """

    def __init__(self, template_path: str = "templates") -> None:
        service_root = Path(__file__).parent.parent
        self.template_dir = service_root / template_path
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml", "j2"]),
            enable_async=True,
        )

    async def render(self, template_id: str, variables: dict[str, str]) -> RenderedEmail:
        template_filename = f"{template_id}.html.j2"
        try:
            template = self.env.get_template(template_filename)
        except TemplateNotFound:
            logger.error(f"Template not found: {template_filename}")
            raise_validation_error(
                service="campus_identity_service",
                operation="render_template",
                field="template_id",
                message=f"Template not found: {template_id}",
                correlation_id=uuid4(),
            )

        html_content = await template.render_async(**variables)
        subject_match = _SUBJECT_PATTERN.search(html_content)
        subject = subject_match.group(1) if subject_match else f"UAPMP - {template_id}"

        return RenderedEmail(
            subject=subject,
            html_content=html_content,
            text_content=self._html_to_text(_SUBJECT_PATTERN.sub("", html_content)),
        )

    def _html_to_text(self, html: str) -> str:
        text = _TAG_PATTERN.sub("", html)
        lines = [line.strip() for line in text.splitlines()]
        return "\n".join(line for line in lines if line)
