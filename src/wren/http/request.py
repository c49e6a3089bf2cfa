"""The request object handed to middleware and route handlers.

Metadata is frozen when the ASGI scope is translated. The body is read
lazily from ASGI ``receive`` at most once; the body-parsing stage stores
its result in the shared cache so handlers see it as ``body_data``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.http.accept import accepts
from wren.http.headers import Headers
from wren.http.query import QueryParams

_BODY = "_body"
_PARSED = "_parsed"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``with_path_params()`` derives the routed copy; both copies share one
    body cache, so reading the body through either is the same read.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, Any]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    _receive: Receive
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Translate an ASGI ``http`` scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(tuple(pair) for pair in scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )

    # -- Header views --

    @property
    def origin(self) -> str | None:
        """The ``Origin`` header, or ``None`` for same-origin and non-browser callers."""
        return self.headers.get("origin")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """Declared ``Content-Length``; ``None`` when absent or not a number."""
        value = self.headers.get("content-length")
        if value is None or not value.strip().isdigit():
            return None
        return int(value)

    @property
    def url(self) -> str:
        """Path plus query string."""
        if not self.query.raw:
            return self.path
        return f"{self.path}?{self.query.raw.decode('latin-1')}"

    def accepts(self, media_type: str) -> bool:
        """Whether the ``Accept`` header allows *media_type* (``"json"``, ``"text/html"``)."""
        return accepts(self.headers.get("accept"), media_type)

    # -- Body --

    @property
    def body_data(self) -> Any:
        """The parsed JSON or form body, or ``None`` if nothing was parsed."""
        return self._cache.get(_PARSED)

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield body chunks straight from ASGI ``receive``. Not cached."""
        more = True
        while more:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            more = message.get("more_body", False)
            if chunk:
                yield chunk

    async def body(self) -> bytes:
        """The whole body. Read once, then served from the cache."""
        if _BODY not in self._cache:
            self._cache[_BODY] = b"".join([chunk async for chunk in self.stream()])
        return self._cache[_BODY]

    async def text(self, encoding: str = "utf-8") -> str:
        return (await self.body()).decode(encoding)

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    def with_path_params(self, path_params: dict[str, Any]) -> Request:
        """Copy carrying the matched route's path parameters."""
        return replace(self, path_params=path_params)
