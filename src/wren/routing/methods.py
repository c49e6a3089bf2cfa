"""The closed set of HTTP methods a route can be registered against."""

from enum import StrEnum

from wren.errors import ConfigurationError


class HttpMethod(StrEnum):
    """Supported route methods. ``ALL`` matches any request method."""

    ALL = "ALL"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"

    @classmethod
    def parse(cls, value: "HttpMethod | str") -> "HttpMethod":
        """Resolve *value* (any case) to a member.

        Raises:
            ConfigurationError: For anything outside the supported set.
                Unknown methods are never mapped to a default.
        """
        if isinstance(value, HttpMethod):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        supported = ", ".join(m.value.lower() for m in cls)
        msg = f"Unsupported route method {value!r}. Supported: {supported}."
        raise ConfigurationError(msg)
