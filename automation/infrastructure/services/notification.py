"""Notification: Jinja template renderer and log-only sender."""

from __future__ import annotations

import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from automation.shared.telemetry.logging import get_logger
from automation.shared.utils.datetime import utc_now

logger = get_logger(__name__)

# In-repo template definitions: key -> (subject_template, body_template)
# Context: params (resolved action params), record (record under automation)
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    "default": (
        "{{ params.get('subject', 'Automation notification') }}",
        "{{ params.get('message', '') }}",
    ),
    "deal_won": (
        "Deal {{ record.get('name', '') }} won",
        "Congratulations! Deal {{ record.get('name', '') }} moved to "
        "{{ record.get('stage', 'Won') }}.\n"
        "{% if params.get('owner') %}Owner: {{ params.owner }}\n{% endif %}",
    ),
    "viewing_reminder": (
        "Viewing reminder for {{ record.get('property_name', 'your property') }}",
        "Your viewing is scheduled for {{ record.get('scheduled_at', 'N/A') }}.",
    ),
}


class NotificationTemplateRenderer:
    """Renders subject and body for a notification from a template key."""

    def __init__(
        self,
        templates: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._env = Environment(autoescape=False, undefined=StrictUndefined)
        self._compiled: dict[str, tuple[Template, Template]] = {}
        for key, (sub_str, body_str) in self._templates.items():
            self._compiled[key] = (
                self._env.from_string(sub_str),
                self._env.from_string(body_str),
            )

    def render(self, template_key: str, params: dict[str, Any]) -> tuple[str, str]:
        """Render subject and body for the template key. Raises KeyError if key unknown."""
        if template_key not in self._compiled:
            raise KeyError(f"Unknown notification template: {template_key}")
        record = params.get("record")
        ctx = {
            "params": params,
            "record": record if isinstance(record, dict) else {},
        }
        subject_tpl, body_tpl = self._compiled[template_key]
        return subject_tpl.render(**ctx), body_tpl.render(**ctx)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of sending.

    Use when no email/SMS provider is configured.
    """

    def __init__(self, renderer: NotificationTemplateRenderer | None = None) -> None:
        self.renderer = renderer or NotificationTemplateRenderer()

    async def send(
        self,
        channel: str,
        template: str,
        recipient: str,
        params: dict[str, Any],
    ) -> None:
        """Render and log the notification; raises on unknown template or render error."""
        try:
            subject, body = self.renderer.render(template, params)
        except TemplateError as e:
            raise ValueError(f"Template {template!r} failed to render: {e}") from e
        if not recipient:
            logger.info(
                "Notify (%s): no recipient, skipping send (subject=%r)",
                channel,
                subject[:80],
            )
            return
        logger.info(
            "Notify (%s): would send to %s (subject=%r)",
            channel,
            recipient,
            subject[:80],
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Notify body (first 500 chars, at %s): %s",
                utc_now().isoformat(),
                body[:500],
            )
