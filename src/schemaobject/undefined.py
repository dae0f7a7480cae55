"""
Sentinel for "no stored value".

None is a legitimate value (it survives typecasting when preserve_null is on),
so an unset field needs its own marker. UNDEFINED never leaks out of the
public instance surface: attribute and item reads convert it to None.
"""


class _Undefined:
    """Singleton marker for an unset field."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'UNDEFINED'

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


def is_undefined(value) -> bool:
    """Check whether a value is the UNDEFINED sentinel."""
    return value is UNDEFINED
