"""Infrastructure services (notification delivery)."""

from automation.infrastructure.services.notification import (
    LogOnlyNotificationService,
    NotificationTemplateRenderer,
)

__all__ = ["LogOnlyNotificationService", "NotificationTemplateRenderer"]
