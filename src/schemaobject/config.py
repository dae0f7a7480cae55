"""
Schema options and process-wide defaults.

SchemaOptions is the options record attached to every generated factory.
define_schema() builds it in two layers:

    process-wide defaults (set_default_options)  ->  explicit keyword options

The defaults layer is module-level state, like a base config registry: set it
once at startup (e.g. to make every schema emit undefined keys) and every
factory defined afterwards picks it up. Factories already defined keep the
options they were created with.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# Numeric timestamps below this magnitude are seconds, otherwise milliseconds.
DATE_SECONDS_THRESHOLD = 10_000_000_000

# Separator for dot-notation keys ("user.address.city").
PATH_SEPARATOR = '.'


@dataclass
class SchemaOptions:
    """Options shared by all instances of one factory.

    Attributes:
        strict: Ignore writes to undeclared keys. When False, an undeclared
            key is added to the shared schema as an ``any`` field.
        dot_notation: Resolve ``obj["a.b.c"]`` by walking nested values.
        emit_undefined: Emit unset fields (as None) and empty containers
            from to_object() instead of omitting them.
        preserve_null: Keep None as a value instead of clearing the field.
        case_insensitive_keys: Match undeclared keys against declared ones
            ignoring case ("profileurl" writes "profileURL").
        before_value_set: ``hook(value, field_name, instance)``; returning
            False cancels the write.
        after_value_set: ``hook(value, field_name, instance)`` fired after a
            value has been stored.
        output_transform: ``hook(result, instance)`` rewriting the dict
            produced by to_object().
        inherit_root_context: Nested instances use the root of the instance
            that created them instead of themselves. Set automatically for
            schemas compiled from inline sub-schema declarations.
        constructors: Named alternate constructors. The ``default`` entry, if
            present, replaces the constructor used by ``Factory(values)``.
        methods: Instance methods added to the generated class.
    """
    strict: bool = True
    dot_notation: bool = False
    emit_undefined: bool = False
    preserve_null: bool = False
    case_insensitive_keys: bool = False
    before_value_set: Optional[Callable[..., Any]] = None
    after_value_set: Optional[Callable[..., Any]] = None
    output_transform: Optional[Callable[..., Any]] = None
    inherit_root_context: bool = False
    constructors: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    methods: Dict[str, Callable[..., Any]] = field(default_factory=dict)

    def inherited(self) -> 'SchemaOptions':
        """Options for a sub-schema compiled from an inline declaration.

        Everything is inherited except output_transform, constructors and
        methods; the nested schema always resolves hooks against the
        enclosing root.
        """
        return dataclasses.replace(
            self,
            output_transform=None,
            inherit_root_context=True,
            constructors={},
            methods={},
        )


OPTION_NAMES = frozenset(f.name for f in dataclasses.fields(SchemaOptions))

# Process-wide defaults applied before explicit options
_default_overrides: Dict[str, Any] = {}


def set_default_options(**overrides: Any) -> None:
    """Set process-wide defaults for factories defined from now on.

    Args:
        **overrides: Any SchemaOptions field

    Raises:
        SchemaDefinitionError: If an option name is unknown
    """
    _check_option_names(overrides)
    _default_overrides.update(overrides)
    logger.debug(f"Default schema options updated: {sorted(overrides)}")


def get_default_options() -> SchemaOptions:
    """Return a fresh SchemaOptions built from the current defaults."""
    return SchemaOptions(**_copy_overrides(_default_overrides))


def reset_default_options() -> None:
    """Drop every process-wide default override."""
    _default_overrides.clear()


def build_options(**explicit: Any) -> SchemaOptions:
    """Resolve options as defaults first, then explicit keyword options.

    Args:
        **explicit: Options passed to define_schema()

    Returns:
        A new SchemaOptions instance

    Raises:
        SchemaDefinitionError: If an option name is unknown or a hook is not
            callable
    """
    _check_option_names(explicit)
    merged = _copy_overrides(_default_overrides)
    merged.update(_copy_overrides(explicit))
    options = SchemaOptions(**merged)

    from schemaobject.errors import SchemaDefinitionError
    for hook_name in ('before_value_set', 'after_value_set', 'output_transform'):
        hook = getattr(options, hook_name)
        if hook is not None and not callable(hook):
            raise SchemaDefinitionError(f"Option '{hook_name}' must be callable, got {type(hook).__name__}")
    return options


def _copy_overrides(overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Copy an overrides dict, detaching the constructor/method registries."""
    copied = dict(overrides)
    for registry in ('constructors', 'methods'):
        if copied.get(registry) is not None:
            copied[registry] = dict(copied[registry])
        elif registry in copied:
            copied[registry] = {}
    return copied


def _check_option_names(options: Dict[str, Any]) -> None:
    unknown = set(options) - OPTION_NAMES
    if unknown:
        from schemaobject.errors import SchemaDefinitionError
        raise SchemaDefinitionError(f"Unknown schema option(s): {', '.join(sorted(unknown))}")
