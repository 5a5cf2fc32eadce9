"""Application interfaces (ports) for dependency inversion."""

from automation.application.interfaces.repositories import (
    IExecutionLogRepository,
    IGraphRepository,
    IRecordStore,
    IWorkflowDefinitionRepository,
)
from automation.application.interfaces.services import (
    IActivitySink,
    INotificationService,
)

__all__ = [
    "IActivitySink",
    "IExecutionLogRepository",
    "IGraphRepository",
    "INotificationService",
    "IRecordStore",
    "IWorkflowDefinitionRepository",
]
