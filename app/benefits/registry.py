"""Per-compilation field accumulator.

A FieldRegistry is created for each compilation pass and threaded through
the builders, so concurrent compilations never share state. It owns the
"already created" guard: the first field with a given name wins, later
attempts are discarded with a DUPLICATE_FIELD warning.
"""

import logging
from typing import Dict, List, Optional

from .models import (
    CompilationWarning,
    CompilationWarningCode,
    FieldSchema,
    SchemaFragment,
)

log = logging.getLogger(__name__)


class FieldRegistry:
    """Ordered field store with duplicate detection and warning collection."""

    def __init__(self) -> None:
        self._fields: Dict[str, FieldSchema] = {}
        self._required: List[str] = []
        self._warnings: List[CompilationWarning] = []

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def warnings(self) -> List[CompilationWarning]:
        return list(self._warnings)

    def add(self, field: FieldSchema) -> bool:
        """Register a field unless its name is already taken.

        Returns:
            True if the field was added, False if it was a duplicate.
        """
        if field.name in self._fields:
            self.warn(
                CompilationWarningCode.DUPLICATE_FIELD,
                f"Skipped duplicate field creation: {field.name}",
                field_name=field.name,
            )
            return False

        self._fields[field.name] = field
        if field.required:
            self._required.append(field.name)
        return True

    def warn(
        self,
        code: CompilationWarningCode,
        message: str,
        field_name: Optional[str] = None,
        rule_index: Optional[int] = None,
    ) -> None:
        log.warning(message, extra={"field_name": field_name or "-"})
        self._warnings.append(
            CompilationWarning(
                code=code,
                message=message,
                field_name=field_name,
                rule_index=rule_index,
            )
        )

    def extend_warnings(self, warnings: List[CompilationWarning]) -> None:
        """Adopt warnings already logged by another stage."""
        self._warnings.extend(warnings)

    def fragment(self) -> SchemaFragment:
        return SchemaFragment(
            properties=dict(self._fields),
            required=list(self._required),
            warnings=list(self._warnings),
        )
