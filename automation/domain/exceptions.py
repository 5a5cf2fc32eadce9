"""Domain exceptions for the automation engine.

Defines domain-level exceptions for configuration, input, persistence and
graph structure failures. These exceptions are independent of
infrastructure concerns. Presentation layer maps them to HTTP responses in
exception handlers.
"""

from typing import Any


class AutomationException(Exception):
    """Base exception for all automation engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. node_id, config key).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AutomationException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ConfigurationException(AutomationException):
    """Raised when a node or action is missing a required config key."""

    def __init__(self, message: str, key: str | None = None) -> None:
        """Initialize with message and optional config key.

        Args:
            message: Description of the configuration problem.
            key: The missing or invalid configuration key.
        """
        details = {"key": key} if key else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class InputException(AutomationException):
    """Raised when a node receives unusable input (e.g. no coordinates)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INPUT_ERROR")


class ResourceNotFoundException(AutomationException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'deal', 'graph').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class PersistenceException(AutomationException):
    """Raised when a store operation fails for a transient reason."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message, "PERSISTENCE_ERROR", details)


class GraphValidationException(AutomationException):
    """Raised when a node graph is structurally invalid."""

    def __init__(
        self,
        message: str,
        error_code: str = "GRAPH_INVALID",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class CycleDetectedException(GraphValidationException):
    """Raised when the edge set of a graph contains a cycle."""

    def __init__(self, node_ids: list[str]) -> None:
        """Initialize with the nodes left unordered by the topological sort.

        Args:
            node_ids: Ids of nodes that participate in (or depend on) a cycle.
        """
        super().__init__(
            f"Graph contains a cycle involving: {', '.join(sorted(node_ids))}",
            "GRAPH_CYCLE",
            {"node_ids": sorted(node_ids)},
        )
