"""Invoke helpers — call sync or async callables uniformly.

Route handlers and the custom error handler can be ``def`` or
``async def``. Any code that calls a user-provided callable must handle
both cases; the sync/async check lives here.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(handler, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
