"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias

# Route handler: receives the Request, returns any negotiable value
Handler: TypeAlias = Callable[..., Any]

# Custom error sink: receives the original exception, return value ignored
ErrorSink: TypeAlias = Callable[[Exception], Any]


class Logger(Protocol):
    """The logging collaborator wren needs. ``logging.Logger`` satisfies it."""

    def info(self, msg: Any, /, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: Any, /, *args: Any, **kwargs: Any) -> None: ...
