"""
Typecast engine.

typecast() coerces and validates one candidate value against a FieldSpec and
returns either Accepted(value) or Rejected(error). It never raises for bad
data; the field accessor records rejections on the owning instance's ledger.

Order of operations for every type:

    1. spec.transform(value, original_value, spec, root)
    2. None with preserve_null            -> Accepted(None)
    3. per-type coercion, type-specific transform, constraint checks

Clearing inputs (None, and "" for number/boolean/date) yield UNDEFINED, which
the accessor stores as "no value".
"""

import datetime
import logging
import math
import numbers
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from dateutil import parser as date_parser

from schemaobject.config import DATE_SECONDS_THRESHOLD
from schemaobject.errors import ValidationError, ValidationRule
from schemaobject.field_spec import ALIAS, ANY, ARRAY, BOOLEAN, DATE, NUMBER, OBJECT, STRING, FieldSpec
from schemaobject.hooks import call_hook
from schemaobject.undefined import UNDEFINED

if TYPE_CHECKING:
    from schemaobject.instance import SchemaObjectInstance

logger = logging.getLogger(__name__)

_INTEGER_LITERAL = re.compile(r'\s*[+-]?\d+\s*')
_NUMERIC_LITERAL = re.compile(r'\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*')

# Fills the parts a date string leaves out ("2024" -> 2024-01-01)
_PARSE_DEFAULT = datetime.datetime(1970, 1, 1)


@dataclass(frozen=True)
class Accepted:
    """The value to store."""
    value: Any


@dataclass(frozen=True)
class Rejected:
    """The value was refused; the field keeps its previous value."""
    error: ValidationError


TypecastResult = Union[Accepted, Rejected]


# =============================================================================
# Value classification helpers
# =============================================================================

def is_structural(value: Any) -> bool:
    """Mappings, non-string sequences, sets and schema containers."""
    from schemaobject.instance import SchemaObjectInstance

    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (Mapping, list, tuple, set, frozenset, SchemaObjectInstance))


def is_numeric(value: Any) -> bool:
    """Finite numbers and strings that spell one. Booleans are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Number):
        try:
            return math.isfinite(value)
        except TypeError:
            # complex
            return False
    if isinstance(value, str):
        if not _NUMERIC_LITERAL.fullmatch(value):
            return False
        return math.isfinite(float(value))
    return False


def js_truthy(value: Any) -> bool:
    """Truthiness with empty containers counting as true."""
    if value is None or value is UNDEFINED or value is False:
        return False
    if isinstance(value, str):
        return value != ''
    if isinstance(value, numbers.Number) and not isinstance(value, complex):
        return value == value and value != 0
    return True


def _to_number(value: Any) -> Any:
    if isinstance(value, str):
        if _INTEGER_LITERAL.fullmatch(value):
            return int(value)
        return float(value)
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    return str(value)


def _is_clearing(value: Any) -> bool:
    return value is None or value is UNDEFINED or (isinstance(value, str) and value == '')


def _root_of(owner: 'SchemaObjectInstance') -> Any:
    return object.__getattribute__(owner, '_root')


def _reject(message: str, value: Any, original_value: Any, spec: FieldSpec,
            rule: ValidationRule = ValidationRule.TYPE) -> Rejected:
    return Rejected(ValidationError(
        message=message,
        value=value,
        original_value=original_value,
        field_spec=spec,
        rule=rule,
        field=spec.name,
    ))


# =============================================================================
# Entry point
# =============================================================================

def typecast(value: Any, original_value: Any, spec: FieldSpec, owner: 'SchemaObjectInstance') -> TypecastResult:
    """
    Coerce and validate a candidate value for a field.

    Args:
        value: Candidate value as written by the caller
        original_value: Value the field currently holds (for object/array
                        fields: the existing container, or UNDEFINED)
        spec: Normalized FieldSpec
        owner: Instance owning the field; provides options and root context

    Returns:
        Accepted with the value to store, or Rejected with a ValidationError
    """
    options = type(owner).options
    root = _root_of(owner)

    if spec.transform is not None:
        value = call_hook(spec.transform, value, original_value, spec, root)

    if value is None and options.preserve_null:
        return Accepted(None)

    caster = _CASTERS.get(spec.type)
    if caster is None:
        return Accepted(value)
    return caster(value, original_value, spec, owner, root)


# =============================================================================
# Per-type casters
# =============================================================================

def _cast_string(value, original_value, spec, owner, root) -> TypecastResult:
    if is_structural(value):
        return _reject('String type cannot typecast Object or Array types.', value, original_value, spec)

    if value is None or value is UNDEFINED:
        return Accepted(UNDEFINED)

    value = _stringify(value)

    if spec.string_transform is not None:
        value = call_hook(spec.string_transform, value, original_value, spec, root)

    if spec.clip and spec.max_length is not None:
        value = value[:spec.max_length]

    if spec.enum is not None and value not in spec.enum:
        return _reject('String does not exist in enum list.', value, original_value, spec, ValidationRule.ENUM)

    if spec.min_length is not None and len(value) < spec.min_length:
        return _reject('String length too short to meet min_length requirement.',
                       value, original_value, spec, ValidationRule.MIN_LENGTH)

    if spec.max_length is not None and len(value) > spec.max_length:
        return _reject('String length too long to meet max_length requirement.',
                       value, original_value, spec, ValidationRule.MAX_LENGTH)

    if spec.regex is not None and not spec.regex.search(value):
        return _reject('String does not match regular expression pattern.',
                       value, original_value, spec, ValidationRule.REGEX)

    return Accepted(value)


def _cast_number(value, original_value, spec, owner, root) -> TypecastResult:
    if _is_clearing(value):
        return Accepted(UNDEFINED)

    if isinstance(value, bool):
        value = 1 if value else 0

    # Thousands separators
    if isinstance(value, str):
        value = value.replace(',', '')

    if is_structural(value) or not is_numeric(value):
        return _reject('Number type cannot typecast non-numeric, Array or Object types.', value, original_value, spec)

    value = _to_number(value)

    if spec.number_transform is not None:
        value = call_hook(spec.number_transform, value, original_value, spec, root)

    if spec.min is not None and value < spec.min:
        return _reject('Number is too small to meet min requirement.', value, original_value, spec, ValidationRule.MIN)

    if spec.max is not None and value > spec.max:
        return _reject('Number is too big to meet max requirement.', value, original_value, spec, ValidationRule.MAX)

    return Accepted(value)


def _cast_boolean(value, original_value, spec, owner, root) -> TypecastResult:
    if _is_clearing(value):
        return Accepted(UNDEFINED)

    if value == 'false':
        return Accepted(False)

    if is_numeric(value):
        return Accepted(_to_number(value) > 0)

    value = js_truthy(value)

    if spec.boolean_transform is not None:
        value = call_hook(spec.boolean_transform, value, original_value, spec, root)

    return Accepted(value)


def _cast_array(value, original_value, spec, owner, root) -> TypecastResult:
    from schemaobject.containers import SchemaArray

    # Mappings are flattened to their values
    if isinstance(value, Mapping):
        value = list(value.values())
    elif isinstance(value, SchemaArray):
        value = list(value)

    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        return _reject('Array type cannot typecast non-Array types.', value, original_value, spec)

    # Snapshot before clearing: the input may be the container itself
    values = list(value)

    # Arrays are never replaced; values are copied into the existing container
    container = original_value
    if not isinstance(container, SchemaArray):
        container = SchemaArray(owner, spec)
    container.clear()
    container.extend(values)
    return Accepted(container)


def _cast_object(value, original_value, spec, owner, root) -> TypecastResult:
    from schemaobject.instance import SchemaObjectInstance

    if not isinstance(value, (Mapping, SchemaObjectInstance)):
        return _reject('Object type cannot typecast non-Object types.', value, original_value, spec)

    if spec.object_type is None:
        return Accepted(value)

    # Snapshot before clearing: the input may be the nested instance itself
    values = value.to_object() if isinstance(value, SchemaObjectInstance) else dict(value)

    # Nested instances keep their identity; clear and repopulate
    if isinstance(original_value, SchemaObjectInstance):
        nested = original_value
        nested.clear()
    else:
        nested = spec.object_type._create({}, root)
    nested.populate(values)
    return Accepted(nested)


def _cast_date(value, original_value, spec, owner, root) -> TypecastResult:
    if _is_clearing(value):
        return Accepted(UNDEFINED)

    if isinstance(value, bool) or not isinstance(value, (datetime.date, str, numbers.Number)):
        return _reject('Date type cannot typecast Array or Object types.', value, original_value, spec)

    parsed = _parse_date(value)
    if parsed is None:
        return _reject('Could not parse date.', value, original_value, spec, ValidationRule.DATE)

    if spec.date_transform is not None:
        parsed = call_hook(spec.date_transform, parsed, original_value, spec, root)

    return Accepted(parsed)


def _parse_date(value: Any):
    """Return a datetime for a datetime, date, timestamp or date string; None if unparsable."""
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())

    # Strings are always parsed as dates; only real numbers are timestamps
    if isinstance(value, str):
        try:
            return date_parser.parse(value, default=_PARSE_DEFAULT)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Could not parse date string {value!r}: {e}")
            return None

    if not is_numeric(value):
        return None

    # Small magnitudes are seconds, large ones milliseconds
    seconds = float(value) if abs(value) < DATE_SECONDS_THRESHOLD else float(value) / 1000
    try:
        return datetime.datetime.fromtimestamp(seconds, tz=datetime.timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _cast_passthrough(value, original_value, spec, owner, root) -> TypecastResult:
    return Accepted(value)


_CASTERS = {
    STRING: _cast_string,
    NUMBER: _cast_number,
    BOOLEAN: _cast_boolean,
    ARRAY: _cast_array,
    OBJECT: _cast_object,
    DATE: _cast_date,
    ALIAS: _cast_passthrough,
    ANY: _cast_passthrough,
}
