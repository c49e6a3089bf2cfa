"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response; the original is never
modified.
"""

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Constructors --

    @classmethod
    def json(cls, data: Any, *, status: int = 200) -> "Response":
        """A JSON response, e.g. ``Response.json({"message": "Not found."}, status=404)``."""
        return cls(
            body=json_module.dumps(data, default=str),
            status=status,
            content_type="application/json",
        )

    @classmethod
    def plain(cls, body: str, *, status: int = 200) -> "Response":
        """A ``text/plain`` response."""
        return cls(body=body, status=status, content_type="text/plain; charset=utf-8")

    # -- Chainable transformations --

    def with_status(self, status: int) -> "Response":
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> "Response":
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        name_lower = name.lower()
        for key, value in self.headers:
            if key.lower() == name_lower:
                return value
        return None

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json_body(self) -> Any:
        """Decode the body as JSON (handy in tests)."""
        return json_module.loads(self.body_bytes)
