"""Template resolution for action parameters.

Replaces {{object.field}} placeholders in a single pass. Reserved objects
(the record under automation, e.g. deal) read from the run's new values;
any other object reads the stored variable "object.field". Unresolved
placeholders are left verbatim.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from automation.application.use_cases.workflows.execution_context import (
        ExecutionContext,
    )

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\.(\w+)\}\}")

DEFAULT_RECORD_OBJECTS = frozenset({"offer", "property", "contact", "deal"})


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


class TemplateResolver:
    """Resolves {{object.field}} placeholders against an ExecutionContext."""

    def __init__(self, record_objects: Iterable[str] | None = None) -> None:
        self._record_objects = (
            frozenset(o.lower() for o in record_objects)
            if record_objects is not None
            else DEFAULT_RECORD_OBJECTS
        )

    def lookup(self, obj: str, field_name: str, context: ExecutionContext) -> Any:
        """Return the raw value for obj.field, or None when unresolved."""
        if obj.lower() in self._record_objects:
            return context.new_values.get(field_name)
        return context.variables.get(f"{obj}.{field_name}")

    def resolve(self, template: str, context: ExecutionContext) -> str:
        """Interpolate every placeholder once; leave unknown ones as written."""

        def replace(match: re.Match[str]) -> str:
            value = self.lookup(match.group(1), match.group(2), context)
            if value is None:
                return match.group(0)
            return _stringify(value)

        return PLACEHOLDER_RE.sub(replace, template)

    def resolve_value(self, value: Any, context: ExecutionContext) -> Any:
        """Resolve strings; recurse into dicts and lists; pass other values through."""
        if isinstance(value, str):
            return self.resolve(value, context)
        if isinstance(value, dict):
            return {k: self.resolve_value(v, context) for k, v in value.items()}
        if isinstance(value, list):
            return [self.resolve_value(v, context) for v in value]
        return value
