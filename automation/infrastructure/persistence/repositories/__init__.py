"""SQLAlchemy repositories implementing the application ports."""

from automation.infrastructure.persistence.repositories.execution_log_repo import (
    ExecutionLogRepository,
    SqlActivitySink,
)
from automation.infrastructure.persistence.repositories.record_store_repo import (
    SqlRecordStore,
)
from automation.infrastructure.persistence.repositories.workflow_definition_repo import (
    NodeGraphRepository,
    WorkflowDefinitionRepository,
)

__all__ = [
    "ExecutionLogRepository",
    "NodeGraphRepository",
    "SqlActivitySink",
    "SqlRecordStore",
    "WorkflowDefinitionRepository",
]
