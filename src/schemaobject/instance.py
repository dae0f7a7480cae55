"""
Schema object instances and the interception layer.

Every class produced by define_schema() derives from SchemaObjectInstance.
Field access goes through one generic entry point per operation:

    obj.name / obj['name']          -> _get_key     -> FieldAccessor.read
    obj.name = v / obj['name'] = v  -> _set_key     -> FieldAccessor.write
    del obj.name / del obj['name']  -> _delete_key  -> write UNDEFINED
    iter(obj) / 'name' in obj       -> keys of to_object()

Instance internals live in __slots__ and are only touched through
object.__getattribute__ / object.__setattr__, so internal reads and writes
never come back through __getattr__ / __setattr__.

Dot notation (``obj['address.city']``) is available through item access when
the schema enables it. Declared fields whose names collide with instance
methods (``clear``, ``populate``...) are reachable through item access.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, List, Optional

from schemaobject.config import PATH_SEPARATOR
from schemaobject.containers import materialize
from schemaobject.errors import ErrorLedger, ValidationError
from schemaobject.hooks import call_hook
from schemaobject.schema import RESERVED_NAMES
from schemaobject.undefined import UNDEFINED

logger = logging.getLogger(__name__)


def _public(value: Any) -> Any:
    """UNDEFINED never leaves the public surface."""
    return None if value is UNDEFINED else value


class SchemaObjectMeta(type):
    """
    Metaclass of generated factories.

    Exposes the shared schema and options on the class only: instances look
    up ``obj.schema`` like any other field.
    """

    @property
    def schema(cls):
        """The SchemaDefinition shared by every instance of this factory."""
        return cls.__schema__

    @property
    def options(cls):
        """The SchemaOptions of this factory."""
        return cls.__options__

    def extend(cls, schema: Mapping, name: Optional[str] = None, **options: Any) -> type:
        """Derive a factory from this one; see schemaobject.factory.extend_factory."""
        from schemaobject.factory import extend_factory
        return extend_factory(cls, schema, name=name, **options)

    def __repr__(cls) -> str:
        schema = cls.__dict__.get('__schema__')
        if schema is None:
            return super().__repr__()
        return f"<schema '{cls.__name__}' fields=({', '.join(schema)})>"


class SchemaObjectInstance(metaclass=SchemaObjectMeta):
    """Base class of every generated schema object."""

    __slots__ = ('_store', '_errors', '_root')

    # Set on generated subclasses by build_factory()
    __schema__ = None
    __options__ = None

    def __init__(self, values: Optional[Mapping] = None):
        """
        Construct an instance and run the default constructor.

        Args:
            values: Initial values, written through the normal write path
        """
        self._setup(None)
        constructor = type(self).options.constructors.get('default')
        if constructor is not None:
            constructor(self, values)
        else:
            self.populate(values)

    @classmethod
    def _create(cls, values: Optional[Mapping], root: Any) -> 'SchemaObjectInstance':
        """Construct a nested instance that may share the root of its parent."""
        instance = cls._blank(root)
        constructor = cls.options.constructors.get('default')
        if constructor is not None:
            constructor(instance, values)
        else:
            instance.populate(values)
        return instance

    @classmethod
    def _blank(cls, root: Any = None) -> 'SchemaObjectInstance':
        """Instance with defaults applied and no constructor run."""
        instance = cls.__new__(cls)
        instance._setup(root)
        return instance

    def _setup(self, root: Any) -> None:
        if type(self).__schema__ is None:
            raise TypeError("SchemaObjectInstance cannot be instantiated directly; use define_schema()")

        object.__setattr__(self, '_store', {})
        object.__setattr__(self, '_errors', ErrorLedger())
        if root is None or not type(self).options.inherit_root_context:
            root = self
        object.__setattr__(self, '_root', root)

        schema = type(self).schema
        for name in schema:
            schema.accessor(name).apply_default(self)

    # =========================================================================
    # Generic entry points
    # =========================================================================

    def _get_key(self, key: Any) -> Any:
        options = type(self).options
        if options.dot_notation and isinstance(key, str) and PATH_SEPARATOR in key:
            return self._get_path(key)

        schema = type(self).schema
        name = schema.resolve_key(key, options.case_insensitive_keys)
        if name is None:
            return UNDEFINED
        return schema.accessor(name).read(self)

    def _set_key(self, key: Any, value: Any) -> None:
        options = type(self).options
        if options.dot_notation and isinstance(key, str) and PATH_SEPARATOR in key:
            self._set_path(key, value)
            return

        schema = type(self).schema
        name = schema.resolve_key(key, options.case_insensitive_keys)
        if name is None:
            if options.strict or not isinstance(key, str) or not key or key in RESERVED_NAMES:
                logger.debug(f"Ignored write to undeclared key {key!r} on {type(self).__name__}")
                return
            schema.add_field(key)
            name = key

        schema.accessor(name).write(self, value)

    def _delete_key(self, key: Any) -> None:
        self._set_key(key, UNDEFINED)

    def _get_path(self, path: str) -> Any:
        current = self
        for segment in path.split(PATH_SEPARATOR):
            current = _step(current, segment)
            if current is UNDEFINED:
                return UNDEFINED
        return current

    def _set_path(self, path: str, value: Any) -> None:
        *parents, last = path.split(PATH_SEPARATOR)
        container = self
        for segment in parents:
            child = _step(container, segment)
            if child is UNDEFINED or child is None:
                if value is UNDEFINED:
                    return
                # Missing intermediate: create it through the normal write path
                _assign(container, segment, {})
                child = _step(container, segment)
            if not isinstance(child, (SchemaObjectInstance, MutableMapping, list)):
                logger.debug(f"Cannot set {path!r}: segment {segment!r} is not a container")
                return
            container = child
        _assign(container, last, value)

    # =========================================================================
    # Interception
    # =========================================================================

    def __getattr__(self, name: str) -> Any:
        if name.startswith('__') or name in RESERVED_NAMES:
            raise AttributeError(name)
        return _public(self._get_key(name))

    def __setattr__(self, name: str, value: Any) -> None:
        self._set_key(name, value)

    def __delattr__(self, name: str) -> None:
        self._delete_key(name)

    def __getitem__(self, key: Any) -> Any:
        return _public(self._get_key(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        self._set_key(key, value)

    def __delitem__(self, key: Any) -> None:
        self._delete_key(key)

    def keys(self) -> List[str]:
        """Keys present in to_object()."""
        return list(self.to_object().keys())

    def __iter__(self):
        return iter(self.keys())

    def __contains__(self, key: Any) -> bool:
        return key in self.to_object()

    def __len__(self) -> int:
        return len(self.to_object())

    def __bool__(self) -> bool:
        return True

    def __dir__(self) -> List[str]:
        public = {name for name in dir(type(self)) if not name.startswith('_')}
        return sorted(public | set(type(self).schema))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_object()!r})"

    # =========================================================================
    # Instance surface
    # =========================================================================

    def populate(self, values: Optional[Mapping]) -> None:
        """Write every key of ``values`` through the normal write path."""
        if values is None:
            return
        if isinstance(values, SchemaObjectInstance):
            values = values.to_object()
        if not isinstance(values, Mapping):
            raise TypeError(f"populate() expects a mapping, got {type(values).__name__}")
        for key, value in values.items():
            self._set_key(key, value)

    def to_object(self) -> Dict[str, Any]:
        """
        Plain nested value tree of the visible fields.

        Invisible fields are skipped. Unset fields and empty containers are
        omitted unless emit_undefined is on (unset fields are then emitted as
        None). The result shares no mutable structure with the instance.
        """
        schema = type(self).schema
        options = type(self).options
        result: Dict[str, Any] = {}

        for name, spec in schema.items():
            if spec.invisible:
                continue

            value = schema.accessor(name).read(self)
            if value is UNDEFINED:
                if options.emit_undefined:
                    result[name] = None
                continue

            value = materialize(value)
            if not options.emit_undefined and isinstance(value, (dict, list, set)) and not value:
                continue
            result[name] = value

        if options.output_transform is not None:
            result = call_hook(options.output_transform, result, self)
        return result

    def to_json(self) -> Dict[str, Any]:
        """Alias of to_object(), ready for json.dumps()."""
        return self.to_object()

    def clear(self) -> None:
        """Reset every field; nested instances and arrays keep their identity."""
        schema = type(self).schema
        for name in schema:
            schema.accessor(name).clear(self)

    def clone(self) -> 'SchemaObjectInstance':
        """New instance of the same factory built from to_object()."""
        root = object.__getattribute__(self, '_root')
        return type(self)._create(self.to_object(), None if root is self else root)

    def __copy__(self) -> 'SchemaObjectInstance':
        return self.clone()

    def __deepcopy__(self, memo) -> 'SchemaObjectInstance':
        return self.clone()

    def get_errors(self) -> List[ValidationError]:
        """Errors of this instance followed by those of nested instances (path-qualified)."""
        errors = list(object.__getattribute__(self, '_errors'))
        for name, nested in self._nested_instances():
            errors.extend(error.qualified(name) for error in nested.get_errors())
        return errors

    def clear_errors(self) -> None:
        object.__getattribute__(self, '_errors').clear()
        for _, nested in self._nested_instances():
            nested.clear_errors()

    def has_errors(self) -> bool:
        return len(self.get_errors()) > 0

    def _nested_instances(self):
        """Existing nested schema instances; never creates one."""
        schema = type(self).schema
        store = object.__getattribute__(self, '_store')
        for name, spec in schema.items():
            if spec.is_schema_object:
                nested = store.get(name)
                if isinstance(nested, SchemaObjectInstance):
                    yield name, nested


# =============================================================================
# Path helpers
# =============================================================================

def _step(container: Any, segment: str) -> Any:
    """Value of one path segment inside a container, UNDEFINED if absent."""
    if isinstance(container, SchemaObjectInstance):
        return container._get_key(segment)
    if isinstance(container, Mapping):
        return container.get(segment, UNDEFINED)
    if isinstance(container, (list, tuple)) and segment.isdigit():
        index = int(segment)
        return container[index] if index < len(container) else UNDEFINED
    return UNDEFINED


def _assign(container: Any, segment: str, value: Any) -> None:
    """Write one path segment inside a container; UNDEFINED removes it."""
    if isinstance(container, SchemaObjectInstance):
        container._set_key(segment, value)
    elif isinstance(container, MutableMapping):
        if value is UNDEFINED:
            container.pop(segment, None)
        else:
            container[segment] = value
    elif isinstance(container, list) and segment.isdigit():
        index = int(segment)
        if value is UNDEFINED:
            if index < len(container):
                del container[index]
        elif index < len(container):
            container[index] = value
        elif index == len(container):
            container.append(value)
    else:
        logger.debug(f"Cannot assign segment {segment!r} on {type(container).__name__}")
