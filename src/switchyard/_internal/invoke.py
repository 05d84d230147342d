"""Invoke helpers — call sync or async handlers uniformly.

Handlers and middleware can be ``def`` or ``async def``. Any code that
calls a user-provided callable must handle both cases. This module keeps
the sync/async check and the arity check in exactly one place.

Usage::

    from switchyard._internal.invoke import invoke

    result = await invoke(handler, request, response, next)
"""

import inspect
from collections.abc import Callable
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def positional_arity(func: Callable[..., Any], maximum: int) -> int:
    """Return how many positional arguments *func* accepts, capped at *maximum*.

    ``*args`` counts as accepting everything. Callables whose signature
    can't be inspected (some builtins) are assumed to take *maximum*.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return maximum

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return maximum
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return min(count, maximum)
