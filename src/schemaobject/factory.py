"""
Schema factory and extension.

define_schema() turns a schema mapping plus options into a generated class
(the factory). Calling the class builds an instance through its default
constructor; named constructors become class-level callables, and custom
methods are added to the class.

Extension merges a base factory's declarations and options with overrides.
When both define a method or constructor of the same name, the override is
called as ``override(instance, base, *args, **kwargs)`` where ``base`` is the
base implementation already bound to the instance.
"""

import dataclasses
import functools
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from schemaobject.config import SchemaOptions, build_options
from schemaobject.errors import SchemaDefinitionError
from schemaobject.instance import SchemaObjectInstance
from schemaobject.schema import SchemaDefinition

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAME = 'SchemaObject'


def define_schema(schema: Mapping, name: Optional[str] = None, **options: Any) -> type:
    """
    Define a schema and return its factory class.

    Args:
        schema: Field name -> declaration (see schemaobject.field_spec)
        name: Name of the generated class
        **options: SchemaOptions fields (strict, dot_notation, ...)

    Returns:
        A subclass of SchemaObjectInstance

    Raises:
        SchemaDefinitionError: For unknown options, invalid declarations or
            method/constructor name clashes

    Example:
        >>> User = define_schema({'name': {'type': str, 'min_length': 2}, 'age': int})
        >>> user = User({'name': 'Ada', 'age': '36'})
        >>> user.to_object()
        {'name': 'Ada', 'age': 36}
    """
    return build_factory(schema, build_options(**options), name)


def build_factory(schema: Mapping, options: SchemaOptions, name: Optional[str] = None) -> type:
    """Generate the factory class for an already resolved SchemaOptions."""
    class_name = name or DEFAULT_CLASS_NAME
    definition = SchemaDefinition(schema, options)

    namespace = {
        '__slots__': (),
        '__schema__': definition,
        '__options__': options,
        '__declarations__': dict(schema),
        '__module__': __name__,
    }
    factory = type(class_name, (SchemaObjectInstance,), namespace)

    for method_name, method in options.methods.items():
        _check_bindable(factory, method_name, method, 'method')
        setattr(factory, method_name, method)

    for constructor_name, constructor in options.constructors.items():
        if constructor_name == 'default':
            if not callable(constructor):
                raise SchemaDefinitionError("Constructor 'default' must be callable")
            continue
        _check_bindable(factory, constructor_name, constructor, 'constructor')
        setattr(factory, constructor_name, _named_constructor(constructor))

    logger.debug(f"Defined schema {class_name} with fields {list(definition)}")
    return factory


def _check_bindable(factory: type, attr_name: str, func: Callable[..., Any], kind: str) -> None:
    if not callable(func):
        raise SchemaDefinitionError(f"Custom {kind} '{attr_name}' must be callable")
    if hasattr(factory, attr_name):
        raise SchemaDefinitionError(f"Cannot overwrite existing {attr_name} attribute with custom {kind}.")


def _named_constructor(constructor: Callable[..., Any]) -> classmethod:
    """Wrap ``constructor(instance, *args, **kwargs)`` as an alternate class constructor.

    The default constructor still runs first (with no values), so named
    constructors start from the same state as ``Factory()``.
    """
    @functools.wraps(constructor)
    def build(cls, *args, **kwargs):
        instance = cls._create(None, None)
        constructor(instance, *args, **kwargs)
        return instance
    return classmethod(build)


# =============================================================================
# Extension
# =============================================================================

def extend_factory(base: type, schema: Mapping, name: Optional[str] = None, **options: Any) -> type:
    """
    Derive a new factory from ``base``.

    Declarations are merged recursively (mapping declarations merge key by
    key, anything else is replaced). Options are the base options updated
    with ``options``; the ``methods`` and ``constructors`` registries are
    merged by name, binding overridden implementations as ``base``.

    Args:
        base: Factory returned by define_schema()
        schema: Declarations to add or override
        name: Name of the derived class (defaults to the base name)
        **options: SchemaOptions fields to override

    Returns:
        A new factory; the base factory is untouched
    """
    if not (isinstance(base, type) and issubclass(base, SchemaObjectInstance) and base.__schema__ is not None):
        raise SchemaDefinitionError(f"Cannot extend {base!r}: not a schema factory")

    merged_schema = _merge_declarations(base.__declarations__, schema)

    base_options = base.options
    merged = {f.name: getattr(base_options, f.name) for f in dataclasses.fields(base_options)}
    for registry in ('methods', 'constructors'):
        merged[registry] = _merge_registry(getattr(base_options, registry), options.pop(registry, None) or {})
    merged.update(options)

    return build_factory(merged_schema, build_options(**merged), name or base.__name__)


def _merge_declarations(base: Mapping, override: Mapping) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), Mapping) and isinstance(value, Mapping):
            merged[key] = _merge_declarations(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merge_registry(base: Dict[str, Callable[..., Any]], override: Dict[str, Callable[..., Any]]) -> Dict[str, Callable[..., Any]]:
    merged = dict(base)
    for key, func in override.items():
        merged[key] = _bind_base(base[key], func) if key in base else func
    return merged


def _bind_base(base_func: Callable[..., Any], override: Callable[..., Any]) -> Callable[..., Any]:
    """Call ``override(instance, base, ...)`` with ``base`` bound to the same instance."""
    @functools.wraps(override)
    def extended(instance, *args, **kwargs):
        return override(instance, functools.partial(base_func, instance), *args, **kwargs)
    return extended
