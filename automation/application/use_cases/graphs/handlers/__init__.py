"""Built-in node handlers and the handler registry."""

from automation.application.use_cases.graphs.handlers.base import BaseNodeHandler
from automation.application.use_cases.graphs.handlers.registry import (
    NodeHandlerRegistry,
    build_default_registry,
)

__all__ = ["BaseNodeHandler", "NodeHandlerRegistry", "build_default_registry"]
