"""In-memory store implementations (memory backend and tests)."""

from automation.infrastructure.memory.stores import (
    InMemoryActivitySink,
    InMemoryExecutionLogRepository,
    InMemoryGraphRepository,
    InMemoryRecordStore,
    InMemoryWorkflowDefinitionRepository,
)

__all__ = [
    "InMemoryActivitySink",
    "InMemoryExecutionLogRepository",
    "InMemoryGraphRepository",
    "InMemoryRecordStore",
    "InMemoryWorkflowDefinitionRepository",
]
