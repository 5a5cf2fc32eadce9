"""Service interfaces (ports) for the application layer.

Protocols define contracts for external collaborators (DIP).
"""

from __future__ import annotations

from typing import Any, Protocol


# Activity sink interface
class IActivitySink(Protocol):
    """Protocol for the audit/activity sink (best-effort)."""

    async def append(
        self,
        tenant_id: str,
        activity_type: str,
        title: str,
        linked_entity_type: str | None = None,
        linked_entity_id: str | None = None,
        content: str | None = None,
    ) -> None:
        """Append an activity entry linked to an entity."""


# Notification service interface
class INotificationService(Protocol):
    """Protocol for notification delivery (email, sms, ...)."""

    async def send(
        self,
        channel: str,
        template: str,
        recipient: str,
        params: dict[str, Any],
    ) -> None:
        """Send a notification; raises on delivery failure."""
