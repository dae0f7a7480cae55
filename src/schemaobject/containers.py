"""
Array container for ``array`` fields.

SchemaArray is a list owned by exactly one instance field. Every insertion
path (append, extend, insert, +=, item and slice assignment) runs the same
pipeline before anything reaches the list:

    1. typecast each element against spec.array_type (rejected elements dropped)
    2. keep elements passing spec.filter
    3. with spec.unique, drop elements already present (or earlier in the batch)

Reordering and removal (sort, reverse, pop, remove, clear, del) go straight to
list since they never introduce new values.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Iterable, List

from schemaobject.field_spec import FieldSpec
from schemaobject.hooks import call_hook
from schemaobject.undefined import UNDEFINED

if TYPE_CHECKING:
    from schemaobject.instance import SchemaObjectInstance

logger = logging.getLogger(__name__)


class SchemaArray(list):
    """List whose insertions are typecast, filtered and de-duplicated."""

    def __init__(self, owner: 'SchemaObjectInstance', spec: FieldSpec, values: Iterable[Any] = ()):
        """
        Args:
            owner: Instance owning the field (typecast context for elements)
            spec: The array field's FieldSpec (array_type, filter, unique)
            values: Initial values, run through the insertion pipeline
        """
        super().__init__()
        self._owner = owner
        self._spec = spec
        self.extend(values)

    @property
    def spec(self) -> FieldSpec:
        return self._spec

    # =========================================================================
    # Insertion pipeline
    # =========================================================================

    def _prepare(self, values: Iterable[Any], existing: List[Any]) -> List[Any]:
        """Run a batch through typecast, filter and uniqueness."""
        from schemaobject.typecast import Rejected, typecast

        element_spec = self._spec.array_type
        prepared = []
        for value in values:
            if element_spec is not None:
                result = typecast(value, UNDEFINED, element_spec, self._owner)
                if isinstance(result, Rejected):
                    logger.debug(f"Dropped array element for '{self._spec.name}': {result.error.message} ({value!r})")
                    continue
                value = result.value
                if value is UNDEFINED:
                    continue
            prepared.append(value)

        if self._spec.filter is not None:
            prepared = [value for value in prepared if call_hook(self._spec.filter, value, self)]

        if self._spec.unique:
            unique = []
            for value in prepared:
                if value not in existing and value not in unique:
                    unique.append(value)
            prepared = unique

        return prepared

    def append(self, value: Any) -> None:
        self.extend([value])

    def extend(self, values: Iterable[Any]) -> None:
        super().extend(self._prepare(values, list(self)))

    def insert(self, index: int, value: Any) -> None:
        for prepared in self._prepare([value], list(self)):
            super().insert(index, prepared)

    def __iadd__(self, values: Iterable[Any]) -> 'SchemaArray':
        self.extend(values)
        return self

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            replaced = range(*index.indices(len(self)))
            remaining = [item for position, item in enumerate(self) if position not in replaced]
            super().__setitem__(index, self._prepare(value, remaining))
            return

        others = [item for position, item in enumerate(self) if position != index % max(len(self), 1)]
        prepared = self._prepare([value], others)
        if prepared:
            super().__setitem__(index, prepared[0])

    # =========================================================================
    # Materialization
    # =========================================================================

    def to_list(self) -> List[Any]:
        """Detached plain list; nested instances and arrays are materialized."""
        return [materialize(element) for element in self]

    def concat(self, *others: Iterable[Any]) -> 'SchemaArray':
        """New array with the same owner and spec holding self followed by others.

        Neither self nor the inputs are modified; every element is pushed
        through the insertion pipeline again.
        """
        values = self.to_list()
        for other in others:
            if isinstance(other, SchemaArray):
                values.extend(other.to_list())
            elif isinstance(other, (list, tuple)):
                values.extend(other)
            else:
                values.append(other)
        return SchemaArray(self._owner, self._spec, values)

    def __add__(self, other: Iterable[Any]) -> 'SchemaArray':
        return self.concat(other)

    def copy(self) -> List[Any]:
        return self.to_list()

    def __repr__(self) -> str:
        return f"SchemaArray({list.__repr__(self)})"


def materialize(value: Any) -> Any:
    """Convert a stored value into a plain value sharing no mutable structure.

    Nested instances become dicts, arrays and tuples become lists and plain
    mappings are copied recursively. Scalars, dates and other objects are
    returned as-is.
    """
    from schemaobject.instance import SchemaObjectInstance

    if isinstance(value, SchemaObjectInstance):
        return value.to_object()
    if isinstance(value, SchemaArray):
        return value.to_list()
    if isinstance(value, (list, tuple)):
        return [materialize(element) for element in value]
    if isinstance(value, Mapping):
        return {key: materialize(element) for key, element in value.items()}
    if isinstance(value, (set, frozenset)):
        return set(value)
    return value
