"""Case-insensitive request headers, decoded from the ASGI scope."""

from collections.abc import Mapping

from wren.http.multimap import MultiValueMap


class Headers(MultiValueMap):
    """Request headers. Names are matched case-insensitively.

    The original byte pairs stay available as ``raw`` for code that has
    to hand them back to ASGI.
    """

    __slots__ = ("raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        super().__init__(
            (name.decode("latin-1"), value.decode("latin-1")) for name, value in raw
        )
        self.raw = raw

    @staticmethod
    def _normalize(key: str) -> str:
        return key.lower()

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        """Build from a plain ``{name: value}`` mapping (tests, clients)."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )
