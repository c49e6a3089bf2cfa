"""Query string parameters."""

from urllib.parse import parse_qsl

from wren.http.multimap import MultiValueMap


class QueryParams(MultiValueMap):
    """Parsed ``?a=1&a=2`` query string; ``raw`` keeps the undecoded bytes."""

    __slots__ = ("raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True))
        self.raw = query_string
