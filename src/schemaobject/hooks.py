"""Invocation of user hooks with a variable number of positional arguments."""

import inspect
import weakref
from typing import Any, Callable, Optional

# Arity per plain function; None means "accepts everything"
_arity_cache: 'weakref.WeakKeyDictionary[Callable[..., Any], Optional[int]]' = weakref.WeakKeyDictionary()


def _positional_arity(hook: Callable[..., Any]) -> Optional[int]:
    """Number of positional arguments to pass, or None for ``*args``.

    Required positional parameters are counted. A callable that accepts an
    optional positional parameter, or whose signature cannot be inspected
    (``int``, ``bool``...), receives at least the leading value.
    """
    cacheable = inspect.isfunction(hook)
    if cacheable and hook in _arity_cache:
        return _arity_cache[hook]

    try:
        signature = inspect.signature(hook)
    except (TypeError, ValueError):
        arity = 1
    else:
        arity = 0
        accepts_positional = False
        for param in signature.parameters.values():
            if param.kind == inspect.Parameter.VAR_POSITIONAL:
                arity = None
                break
            if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                accepts_positional = True
                if param.default is inspect.Parameter.empty:
                    arity += 1
        if arity == 0 and accepts_positional:
            arity = 1

    if cacheable:
        _arity_cache[hook] = arity
    return arity


def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a hook with as many leading positional arguments as it requires.

    Hooks document their full argument list (e.g. ``value, original_value,
    field_spec, root``). A hook declared with fewer required parameters
    receives only the leading ones, so ``str.strip``, ``int`` or
    ``lambda value: ...`` work as-is. Parameters with defaults are left to
    their defaults; a hook taking ``*args`` receives everything.

    Args:
        hook: The user callable
        *args: Full positional argument list

    Returns:
        Whatever the hook returns
    """
    arity = _positional_arity(hook)
    if arity is None:
        return hook(*args)
    return hook(*args[:arity])
