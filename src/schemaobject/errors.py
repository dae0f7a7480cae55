"""
Validation errors and the per-instance error ledger.

Typecast rejections never raise across a field write. They are recorded as
ValidationError entries on the ErrorLedger of the instance that owns the
field, and the field keeps its previous value. Callers inspect the ledger
through get_errors() / has_errors().

The only exception type raised by the package is SchemaDefinitionError, for
configuration mistakes made while defining a schema.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

if TYPE_CHECKING:
    from schemaobject.field_spec import FieldSpec


class SchemaDefinitionError(Exception):
    """Raised for schema or option misconfiguration. Never recovered."""


class ValidationRule(Enum):
    """Which rule a rejected value violated."""
    TYPE = 'type'
    ENUM = 'enum'
    MIN_LENGTH = 'min_length'
    MAX_LENGTH = 'max_length'
    REGEX = 'regex'
    MIN = 'min'
    MAX = 'max'
    DATE = 'date'
    HOOK = 'hook'


@dataclass(frozen=True)
class ValidationError:
    """Immutable record of one rejected write.

    Attributes:
        message: Human readable description
        value: The rejected (possibly partially coerced) value
        original_value: The value the field held before the write
        field_spec: The FieldSpec that was violated
        rule: Which rule was violated
        field: Field path; dotted when surfaced from a nested instance
    """
    message: str
    value: Any
    original_value: Any
    field_spec: 'FieldSpec'
    rule: ValidationRule = ValidationRule.TYPE
    field: Optional[str] = None

    def qualified(self, prefix: str) -> 'ValidationError':
        """Return a copy with the field path prefixed by a containing field."""
        field_name = f"{prefix}.{self.field}" if self.field else prefix
        return dataclasses.replace(self, field=field_name)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


class ErrorLedger:
    """Ordered log of the rejected writes of one instance."""

    def __init__(self):
        self._errors: List[ValidationError] = []

    def append(self, error: ValidationError) -> None:
        self._errors.append(error)

    def clear(self) -> None:
        self._errors.clear()

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __repr__(self) -> str:
        return f"ErrorLedger({self._errors!r})"
