"""
Shared field table of one factory.

A SchemaDefinition is created once per define_schema() call and referenced by
the generated class, so every instance of that class sees the same table.
Permissive (strict=False) schemas grow it at runtime through add_field();
the addition is visible to every existing and future instance of the factory.
That mutation is append-only and not synchronized: callers sharing a
permissive factory across threads must serialize writes themselves.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

from schemaobject.accessors import FieldAccessor
from schemaobject.config import SchemaOptions
from schemaobject.errors import SchemaDefinitionError
from schemaobject.field_spec import ALIAS, ANY, FieldSpec, normalize_field_spec

logger = logging.getLogger(__name__)

# Instance slot names; never usable as field names
RESERVED_NAMES = frozenset({'_store', '_errors', '_root'})


class SchemaDefinition(Mapping):
    """Ordered mapping of field name to FieldSpec, with compiled accessors."""

    def __init__(self, declarations: Mapping, options: SchemaOptions):
        """
        Normalize every declaration.

        Args:
            declarations: Field name -> declaration (any shorthand)
            options: Options of the owning factory; inline sub-schemas
                     inherit them

        Raises:
            SchemaDefinitionError: For invalid declarations or aliases whose
                target is not declared
        """
        if not isinstance(declarations, Mapping):
            raise SchemaDefinitionError(f"Schema must be a mapping, got {type(declarations).__name__}")

        self._options = options
        self._fields: Dict[str, FieldSpec] = {}
        self._accessors: Dict[str, FieldAccessor] = {}
        self._folded: Dict[str, str] = {}

        for name, declaration in declarations.items():
            if not isinstance(name, str) or not name:
                raise SchemaDefinitionError(f"Field names must be non-empty strings, got {name!r}")
            if name in RESERVED_NAMES:
                raise SchemaDefinitionError(f"Field name '{name}' is reserved")
            self._install(normalize_field_spec(declaration, name, options))

        for spec in self._fields.values():
            if spec.type == ALIAS:
                if spec.index not in self._fields:
                    raise SchemaDefinitionError(f"Alias '{spec.name}' targets undeclared field '{spec.index}'")
                if self._fields[spec.index].type == ALIAS:
                    raise SchemaDefinitionError(f"Alias '{spec.name}' cannot target another alias")

    def _install(self, spec: FieldSpec) -> None:
        self._fields[spec.name] = spec
        self._accessors[spec.name] = FieldAccessor(spec)
        self._folded.setdefault(spec.name.lower(), spec.name)

    # =========================================================================
    # Mapping interface
    # =========================================================================

    def __getitem__(self, name: str) -> FieldSpec:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"SchemaDefinition({list(self._fields)})"

    # =========================================================================
    # Lookup
    # =========================================================================

    def accessor(self, name: str) -> FieldAccessor:
        return self._accessors[name]

    def resolve_key(self, name: Any, case_insensitive: bool = False) -> Optional[str]:
        """
        Map a key to its declared field name.

        Args:
            name: Key as given by the caller
            case_insensitive: Fall back to a case-folded match

        Returns:
            The declared name, or None if the key is not declared
        """
        if not isinstance(name, str) or name in RESERVED_NAMES:
            return None
        if name in self._fields:
            return name
        if case_insensitive:
            return self._folded.get(name.lower())
        return None

    # =========================================================================
    # Permissive mode
    # =========================================================================

    def add_field(self, name: str, declaration: Any = ANY) -> FieldSpec:
        """
        Add a field at runtime (permissive mode).

        Shared-state mutation: the field becomes visible to every instance of
        the factory, including ones constructed earlier.
        """
        if name in self._fields:
            return self._fields[name]
        if name in RESERVED_NAMES:
            raise SchemaDefinitionError(f"Field name '{name}' is reserved")
        spec = normalize_field_spec(declaration, name, self._options)
        self._install(spec)
        logger.debug(f"Added dynamic field '{name}' ({spec.type}) to schema")
        return spec
