"""Notification template rendering and the log-only sender."""

import pytest

from automation.infrastructure.services.notification import (
    LogOnlyNotificationService,
    NotificationTemplateRenderer,
)


def test_render_default_template() -> None:
    renderer = NotificationTemplateRenderer()
    subject, body = renderer.render("default", {"subject": "Hello", "message": "World"})
    assert subject == "Hello"
    assert body == "World"


def test_render_deal_won_uses_record() -> None:
    renderer = NotificationTemplateRenderer()
    subject, body = renderer.render(
        "deal_won", {"record": {"name": "Villa", "stage": "Won"}, "owner": "Alice"}
    )
    assert subject == "Deal Villa won"
    assert "Owner: Alice" in body


def test_render_unknown_template_raises() -> None:
    with pytest.raises(KeyError):
        NotificationTemplateRenderer().render("missing", {})


def test_custom_templates() -> None:
    renderer = NotificationTemplateRenderer({"ping": ("Ping {{ params.n }}", "")})
    assert renderer.render("ping", {"n": 3})[0] == "Ping 3"


async def test_log_only_service_logs_instead_of_sending(caplog: pytest.LogCaptureFixture) -> None:
    service = LogOnlyNotificationService()
    with caplog.at_level("INFO"):
        await service.send("email", "default", "a@b.c", {"subject": "Hi"})
    assert "would send to a@b.c" in caplog.text


async def test_log_only_service_render_error_raises() -> None:
    service = LogOnlyNotificationService(
        NotificationTemplateRenderer({"strict": ("{{ params.missing.attr }}", "")})
    )
    with pytest.raises(ValueError):
        await service.send("email", "strict", "a@b.c", {})
