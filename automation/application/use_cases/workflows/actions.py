"""Action dispatch for legacy workflows and graph action nodes.

Each action type has an explicit failure policy. Fail-fast actions raise
and abort the surrounding run; best-effort actions log their failure and
report it in the outcome without raising.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from automation.application.dtos.execution import ActionOutcome
from automation.application.interfaces.repositories import IRecordStore
from automation.application.interfaces.services import (
    IActivitySink,
    INotificationService,
)
from automation.application.services.template_resolver import TemplateResolver
from automation.application.use_cases.workflows.execution_context import (
    ExecutionContext,
)
from automation.domain.entities.workflow import ActionSpec
from automation.domain.exceptions import ConfigurationException
from automation.shared.enums import (
    ActionType,
    AssignmentStrategy,
    FailurePolicy,
    StepStatus,
)
from automation.shared.telemetry.logging import get_logger
from automation.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

FAILURE_POLICY: dict[str, FailurePolicy] = {
    ActionType.UPDATE_RECORD.value: FailurePolicy.FAIL_FAST,
    ActionType.CREATE_RECORD.value: FailurePolicy.FAIL_FAST,
    ActionType.UPSERT_RECORD.value: FailurePolicy.FAIL_FAST,
    ActionType.ASSIGN_AGENT.value: FailurePolicy.FAIL_FAST,
    ActionType.LOG_ACTIVITY.value: FailurePolicy.BEST_EFFORT,
    ActionType.SEND_NOTIFICATION.value: FailurePolicy.BEST_EFFORT,
}

DEFAULT_CREATABLE_ENTITIES = frozenset(
    {"task", "contract", "contact", "deal", "offer", "property", "viewing"}
)

_Handler = Callable[[ActionSpec, ExecutionContext], Awaitable[dict[str, Any]]]


def _require(config: dict[str, Any], key: str, action_type: str) -> Any:
    value = config.get(key)
    if value is None or value == "":
        raise ConfigurationException(f"Missing {key} in {action_type}", key=key)
    return value


class ActionDispatcher:
    """Runs one ActionSpec against the record store / activity sink / notifier."""

    def __init__(
        self,
        record_store: IRecordStore,
        activity_sink: IActivitySink | None = None,
        notification_service: INotificationService | None = None,
        template_resolver: TemplateResolver | None = None,
        creatable_entities: Iterable[str] | None = None,
    ) -> None:
        self._records = record_store
        self._activities = activity_sink
        self._notifications = notification_service
        self._templates = template_resolver or TemplateResolver()
        self._creatable = (
            frozenset(e.lower() for e in creatable_entities)
            if creatable_entities is not None
            else DEFAULT_CREATABLE_ENTITIES
        )
        self._handlers: dict[str, _Handler] = {
            ActionType.UPDATE_RECORD.value: self._update_record,
            ActionType.CREATE_RECORD.value: self._create_record,
            ActionType.LOG_ACTIVITY.value: self._log_activity,
            ActionType.SEND_NOTIFICATION.value: self._send_notification,
            ActionType.UPSERT_RECORD.value: self._upsert_record,
            ActionType.ASSIGN_AGENT.value: self._assign_agent,
        }

    @property
    def template_resolver(self) -> TemplateResolver:
        return self._templates

    def policy_for(self, action_type: str) -> FailurePolicy:
        return FAILURE_POLICY.get(action_type, FailurePolicy.FAIL_FAST)

    async def dispatch(
        self, action: ActionSpec, context: ExecutionContext
    ) -> ActionOutcome:
        """Run the action and return its outcome.

        Raises for fail-fast action failures. Unknown action types are
        logged and reported as skipped.
        """
        logger.info("Executing action: %s (%s)", action.id, action.action_type)
        handler = self._handlers.get(action.action_type)
        if handler is None:
            logger.warning("Unknown action type: %s", action.action_type)
            return ActionOutcome(
                action_id=action.id,
                action_type=action.action_type,
                status=StepStatus.SKIPPED,
                error=f"Unknown action type: {action.action_type}",
            )
        if self.policy_for(action.action_type) == FailurePolicy.FAIL_FAST:
            output = await handler(action, context)
            return ActionOutcome(
                action_id=action.id,
                action_type=action.action_type,
                status=StepStatus.COMPLETED,
                output=output,
            )
        try:
            output = await handler(action, context)
        except Exception as e:
            logger.warning(
                "Best-effort action %s (%s) failed: %s",
                action.id,
                action.action_type,
                e,
            )
            return ActionOutcome(
                action_id=action.id,
                action_type=action.action_type,
                status=StepStatus.FAILED,
                error=str(e),
            )
        return ActionOutcome(
            action_id=action.id,
            action_type=action.action_type,
            status=StepStatus.COMPLETED,
            output=output,
        )

    async def _update_record(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        config = action.config
        entity = _require(config, "entity", action.action_type)
        set_fields = _require(config, "set_fields", action.action_type)
        if not isinstance(set_fields, dict):
            raise ConfigurationException(
                "set_fields must be an object in update_record", key="set_fields"
            )
        raw_id = config.get("record_id")
        record_id = (
            self._templates.resolve(str(raw_id), context)
            if raw_id
            else context.entity_id
        )
        if not record_id:
            raise ConfigurationException(
                "update_record has no record_id and the trigger has no entity id",
                key="record_id",
            )
        fields = self._templates.resolve_value(set_fields, context)
        await self._records.update(context.tenant_id, str(entity), record_id, fields)
        logger.info("Updated %s record: %s", entity, record_id)
        return {"entity": entity, "record_id": record_id, "fields": fields}

    async def _create_record(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        config = action.config
        entity = str(_require(config, "entity", action.action_type))
        if entity.lower() not in self._creatable:
            logger.warning("create_record: unsupported entity '%s', skipping", entity)
            return {"entity": entity, "created": False}
        set_fields = config.get("set_fields") or {}
        if not isinstance(set_fields, dict):
            raise ConfigurationException(
                "set_fields must be an object in create_record", key="set_fields"
            )
        fields = self._templates.resolve_value(set_fields, context)
        new_id = await self._records.create(context.tenant_id, entity, fields)
        output_var = config.get("output_var")
        if output_var:
            context.set_variable(f"{output_var}.id", new_id)
        logger.info("Created %s record: %s", entity, new_id)
        return {"entity": entity, "record_id": new_id, "created": True}

    async def _upsert_record(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        # No match_fields lookup: upsert always creates.
        return await self._create_record(action, context)

    async def _log_activity(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        if self._activities is None:
            logger.warning("log_activity: no activity sink configured, skipping")
            return {"logged": False}
        config = action.config
        raw_entity_id = config.get("entity_id")
        entity_id = (
            self._templates.resolve(str(raw_entity_id), context)
            if raw_entity_id
            else context.entity_id
        )
        title = self._templates.resolve(
            str(config.get("title") or "Workflow executed"), context
        )
        content = config.get("content")
        await self._activities.append(
            context.tenant_id,
            str(config.get("activity_type") or "workflow_action"),
            title,
            linked_entity_type=str(config.get("entity_type") or context.entity_type),
            linked_entity_id=entity_id,
            content=self._templates.resolve(str(content), context) if content else None,
        )
        logger.info("Logged activity: %s", title)
        return {"logged": True, "title": title}

    async def _send_notification(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        config = action.config
        channel = str(config.get("channel") or "email")
        template = str(config.get("template") or "default")
        recipient = self._templates.resolve(str(config.get("to") or ""), context)
        if self._notifications is None:
            logger.warning(
                "send_notification: notification service unavailable (%s to %s)",
                channel,
                recipient,
            )
            return {"sent": False, "channel": channel, "to": recipient}
        params = self._templates.resolve_value(dict(config.get("params") or {}), context)
        params.setdefault("record", dict(context.new_values))
        await self._notifications.send(channel, template, recipient, params)
        return {"sent": True, "channel": channel, "template": template, "to": recipient}

    async def _assign_agent(
        self, action: ActionSpec, context: ExecutionContext
    ) -> dict[str, Any]:
        config = action.config
        method = str(config.get("method") or AssignmentStrategy.ROUND_ROBIN.value)
        if method not in AssignmentStrategy.values():
            logger.warning("assign_agent: unknown method '%s'", method)
        # Placeholder: no real assignment, just a synthetic agent id.
        agent_id = generate_cuid()
        output_var = config.get("output_var")
        if output_var:
            context.set_variable(f"{output_var}.id", agent_id)
        logger.info("Assigned placeholder agent %s using method: %s", agent_id, method)
        return {"agent_id": agent_id, "method": method}
