"""
Runtime schema objects with typecasting and validation.

A schema maps field names to type declarations. define_schema() compiles it
into a factory class whose instances intercept every field read, write and
delete: values are typecast, validated and defaulted on the way in, rejected
writes are logged instead of raised, and to_object() projects the instance
back into a plain nested dict.

Quick Start:
    >>> from schemaobject import define_schema
    >>>
    >>> User = define_schema({
    ...     'name': {'type': str, 'min_length': 2},
    ...     'age': {'type': int, 'min': 0},
    ...     'tags': {'type': [str], 'unique': True},
    ...     'address': {'city': str, 'zip': {'type': str, 'regex': r'^\\d{5}$'}},
    ... })
    >>>
    >>> user = User({'name': 'Ada', 'age': '1,815', 'tags': ['a', 'a', 'b']})
    >>> user.age
    1815
    >>> user.address.zip = 'nope'
    >>> user.get_errors()[0].field
    'address.zip'

Architecture:
    field_spec   declaration shorthands -> FieldSpec
    typecast     FieldSpec + candidate value -> Accepted | Rejected
    containers   SchemaArray (typecast/filter/unique on insertion)
    accessors    per-field read/write/clear (defaults, aliases, hooks, ledger)
    schema       SchemaDefinition shared by all instances of a factory
    instance     interception layer (strict/permissive, case-insensitive keys,
                 dot paths) and to_object()
    factory      define_schema(), named constructors, methods, extension

Modules:
    - config: SchemaOptions and process-wide defaults
    - errors: ValidationError, ErrorLedger, SchemaDefinitionError
    - undefined: the UNDEFINED sentinel
    - hooks: hook invocation helper
"""

from schemaobject.config import (
    DATE_SECONDS_THRESHOLD,
    SchemaOptions,
    get_default_options,
    reset_default_options,
    set_default_options,
)
from schemaobject.containers import SchemaArray, materialize
from schemaobject.errors import (
    ErrorLedger,
    SchemaDefinitionError,
    ValidationError,
    ValidationRule,
)
from schemaobject.factory import define_schema, extend_factory
from schemaobject.field_spec import FIELD_TYPES, FieldSpec, normalize_field_spec
from schemaobject.instance import SchemaObjectInstance, SchemaObjectMeta
from schemaobject.schema import SchemaDefinition
from schemaobject.typecast import Accepted, Rejected, typecast
from schemaobject.undefined import UNDEFINED, is_undefined

__all__ = [
    # Factory
    'define_schema',
    'extend_factory',
    'SchemaObjectInstance',
    'SchemaObjectMeta',
    'SchemaDefinition',
    # Field specs
    'FieldSpec',
    'FIELD_TYPES',
    'normalize_field_spec',
    # Typecasting
    'typecast',
    'Accepted',
    'Rejected',
    'SchemaArray',
    'materialize',
    # Errors
    'ValidationError',
    'ValidationRule',
    'ErrorLedger',
    'SchemaDefinitionError',
    # Configuration
    'SchemaOptions',
    'set_default_options',
    'get_default_options',
    'reset_default_options',
    'DATE_SECONDS_THRESHOLD',
    # Sentinel
    'UNDEFINED',
    'is_undefined',
]

__version__ = '1.0.0'
__description__ = 'Runtime schema objects with typecasting and validation'
