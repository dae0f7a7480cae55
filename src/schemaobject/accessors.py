"""
Per-field read/write/clear behaviour.

One FieldAccessor is compiled per declared field and shared by every instance
of the schema. Accessors work on the raw instance internals (value store,
error ledger, root) through object.__getattribute__, so nothing here ever
re-enters the interception layer of SchemaObjectInstance.
"""

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict

from schemaobject.containers import SchemaArray
from schemaobject.errors import ErrorLedger, ValidationError, ValidationRule
from schemaobject.field_spec import ALIAS, ARRAY, OBJECT, FieldSpec
from schemaobject.hooks import call_hook
from schemaobject.typecast import Rejected, typecast
from schemaobject.undefined import UNDEFINED

if TYPE_CHECKING:
    from schemaobject.instance import SchemaObjectInstance

logger = logging.getLogger(__name__)


def _get_store(instance: 'SchemaObjectInstance') -> Dict[str, Any]:
    """Raw value store, bypassing attribute interception."""
    return object.__getattribute__(instance, '_store')


def _get_ledger(instance: 'SchemaObjectInstance') -> ErrorLedger:
    return object.__getattribute__(instance, '_errors')


def _get_root(instance: 'SchemaObjectInstance') -> Any:
    return object.__getattribute__(instance, '_root')


class FieldAccessor:
    """Read, write and clear operations for one field."""

    def __init__(self, spec: FieldSpec):
        self.spec = spec

    def __repr__(self) -> str:
        return f"FieldAccessor({self.spec.name!r}, type={self.spec.type!r})"

    # =========================================================================
    # Read
    # =========================================================================

    def read(self, instance: 'SchemaObjectInstance') -> Any:
        """
        Externally visible value of the field, UNDEFINED when unset.

        Object and array fields create their container on first read. The
        getter hook shapes the returned value without touching storage.
        """
        spec = self.spec

        if spec.type == ALIAS:
            value = self._target(instance).read(instance)
        else:
            value = self.raw(instance)

        if value is UNDEFINED or spec.getter is None:
            return value

        try:
            return call_hook(spec.getter, value, _get_root(instance))
        except Exception as e:
            self._record_hook_failure(instance, 'getter', value, e)
            return UNDEFINED

    def raw(self, instance: 'SchemaObjectInstance') -> Any:
        """Stored value; composite fields are initialized if absent."""
        stored = _get_store(instance).get(self.spec.name, UNDEFINED)
        if stored is UNDEFINED and self.spec.type in (OBJECT, ARRAY):
            stored = self._initialize(instance)
        return stored

    def _initialize(self, instance: 'SchemaObjectInstance') -> Any:
        """Create the container of an object/array field and apply its default."""
        spec = self.spec
        store = _get_store(instance)

        if spec.type == ARRAY:
            container = SchemaArray(instance, spec)
        elif spec.object_type is not None:
            container = spec.object_type._create(None, _get_root(instance))
        else:
            container = {}
        store[spec.name] = container

        if not spec.has_default:
            return container

        try:
            default = self.produce_default()
        except Exception as e:
            # The empty container stays; the producer is not retried
            self._record_hook_failure(instance, 'default', UNDEFINED, e)
            return container

        result = typecast(default, container, spec, instance)
        if isinstance(result, Rejected):
            self._record(instance, result.error)
            return container
        store[spec.name] = result.value
        return result.value

    def apply_default(self, instance: 'SchemaObjectInstance') -> None:
        """Write a scalar default at construction; object/array defaults apply on first read."""
        spec = self.spec
        if not spec.has_default or spec.type in (OBJECT, ARRAY, ALIAS):
            return
        try:
            default = self.produce_default()
        except Exception as e:
            self._record_hook_failure(instance, 'default', UNDEFINED, e)
            return
        self.write(instance, default, force=True)

    def produce_default(self) -> Any:
        """Evaluate the declared default: call producers, copy literals."""
        default = self.spec.default
        if callable(default):
            return default()
        return copy.deepcopy(default)

    # =========================================================================
    # Write
    # =========================================================================

    def write(self, instance: 'SchemaObjectInstance', value: Any, force: bool = False) -> None:
        """
        Typecast and store a value.

        Rejections are recorded on the instance's ledger and leave the stored
        value untouched; nothing is raised to the caller.

        Args:
            instance: Owning instance
            value: Candidate value
            force: Write even if the field is read-only (used for defaults)
        """
        spec = self.spec
        if spec.read_only and not force:
            logger.debug(f"Ignored write to read-only field '{spec.name}'")
            return

        if self._vetoed(instance, value):
            return

        # Containers are updated in place; other fields pass their visible value
        if spec.type in (OBJECT, ARRAY):
            original_value = self.raw(instance)
        else:
            original_value = self.read(instance)

        result = typecast(value, original_value, spec, instance)
        if isinstance(result, Rejected):
            logger.debug(f"Rejected value for '{spec.name}': {result.error.message} ({result.error.value!r})")
            self._record(instance, result.error)
            return

        # Aliases store nothing; the target field performs the real write
        if spec.type == ALIAS:
            self._target(instance).write(instance, result.value, force=force)
            return

        self._commit(instance, result.value)

    def _vetoed(self, instance: 'SchemaObjectInstance', value: Any) -> bool:
        hook = type(instance).options.before_value_set
        if hook is None or call_hook(hook, value, self.spec.name, instance) is not False:
            return False
        logger.debug(f"Write to '{self.spec.name}' cancelled by before_value_set")
        return True

    def _commit(self, instance: 'SchemaObjectInstance', value: Any) -> None:
        store = _get_store(instance)
        if value is UNDEFINED:
            store.pop(self.spec.name, None)
        else:
            store[self.spec.name] = value

        options = type(instance).options
        if options.after_value_set is not None:
            call_hook(options.after_value_set, value, self.spec.name, instance)

    # =========================================================================
    # Clear
    # =========================================================================

    def clear(self, instance: 'SchemaObjectInstance') -> None:
        """
        Reset the field without replacing container identity.

        Nested instances are cleared recursively and arrays emptied in place.
        Other values are unset without typecasting, ignoring read_only; the
        before_value_set veto and after_value_set still fire. Aliases are
        skipped; their target clears the shared value.
        """
        from schemaobject.instance import SchemaObjectInstance

        spec = self.spec
        if spec.type == ALIAS:
            return

        stored = _get_store(instance).get(spec.name, UNDEFINED)

        if spec.type == OBJECT:
            if isinstance(stored, SchemaObjectInstance):
                stored.clear()
            elif stored is not UNDEFINED:
                # Plain mapping or preserved None; re-created lazily on next read
                self._unset(instance)
            return

        if spec.type == ARRAY:
            if isinstance(stored, SchemaArray):
                stored.clear()
            elif stored is not UNDEFINED:
                self._unset(instance)
            return

        self._unset(instance)

    def _unset(self, instance: 'SchemaObjectInstance') -> None:
        if not self._vetoed(instance, UNDEFINED):
            self._commit(instance, UNDEFINED)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _target(self, instance: 'SchemaObjectInstance') -> 'FieldAccessor':
        return type(instance).schema.accessor(self.spec.index)

    def _record(self, instance: 'SchemaObjectInstance', error: ValidationError) -> None:
        _get_ledger(instance).append(error)

    def _record_hook_failure(self, instance: 'SchemaObjectInstance', hook_name: str, value: Any, error: Exception) -> None:
        logger.warning(f"{hook_name} hook failed for field '{self.spec.name}': {error}")
        self._record(instance, ValidationError(
            message=f"{hook_name} failed: {error}",
            value=value,
            original_value=UNDEFINED,
            field_spec=self.spec,
            rule=ValidationRule.HOOK,
            field=self.spec.name,
        ))
