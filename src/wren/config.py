"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``Application`` resolves it once at construction
(``AppConfig.resolve()``) and never touches it again.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.middleware.protocol import Middleware
    from wren.routing.route import Route

ENVIRONMENTS: frozenset[str] = frozenset({"development", "production"})

# 100 MB
DEFAULT_MAX_BODY_SIZE = 100 * 1024 * 1024


def _environment_from_env() -> str:
    return os.environ.get("ENVIRONMENT", "development")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            port=3000,
            app_name="todos",
            allowed_cors_origin=("https://example.com",),
            routes=(Route("/todos", "get", list_todos),),
        )
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 8800
    app_name: str = "wren-app"
    is_secure_http: bool = False
    environment: str = field(default_factory=_environment_from_env)
    log_level: str = "info"

    # CORS: extra origins merged into the built-in loopback defaults
    allowed_cors_origin: tuple[str, ...] = ()

    # Pipeline
    middleware: tuple["Middleware", ...] = ()
    routes: tuple["Route", ...] = ()
    custom_error_handler: Callable[[Exception], Any] | None = None

    # Limits
    max_body_size: int = DEFAULT_MAX_BODY_SIZE

    # Security headers (None = no Content-Security-Policy header)
    content_security_policy: str | None = None

    # Error pages: a 404.html here overrides the built-in page
    error_page_dir: str | Path = "errors"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def resolve(self) -> "AppConfig":
        """Validate and return the effective configuration.

        Production always runs over the secure transport, whatever the
        caller asked for.

        Raises:
            ConfigurationError: If ``environment`` or ``port`` is invalid.
        """
        if self.environment not in ENVIRONMENTS:
            allowed = ", ".join(sorted(ENVIRONMENTS))
            msg = f"Unknown environment {self.environment!r}. Expected one of: {allowed}."
            raise ConfigurationError(msg)
        if not 0 <= self.port <= 65535:
            msg = f"Port {self.port} is out of range (0-65535)."
            raise ConfigurationError(msg)
        if self.custom_error_handler is not None and not callable(self.custom_error_handler):
            msg = "custom_error_handler must be callable."
            raise ConfigurationError(msg)
        if self.is_production and not self.is_secure_http:
            return replace(self, is_secure_http=True)
        return self
