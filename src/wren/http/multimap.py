"""Read-only multi-valued string mapping.

Base for ``Headers``, ``QueryParams``, and ``FormData``: each key maps to
one or more values, plain lookup returns the first. Subclasses decide how
keys are normalized.
"""

from collections.abc import Iterable, Iterator, Mapping


class MultiValueMap(Mapping[str, str]):
    """``key -> [values]`` with first-value ``Mapping`` semantics."""

    __slots__ = ("_data",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        data: dict[str, list[str]] = {}
        for key, value in items:
            data.setdefault(self._normalize(key), []).append(value)
        self._data = data

    @staticmethod
    def _normalize(key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        return self._data[self._normalize(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._normalize(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value for *key*, in arrival order."""
        return list(self._data.get(self._normalize(key), ()))

    def to_dict(self) -> dict[str, str | list[str]]:
        """Collapse single values, keep lists for repeated keys."""
        return {k: v[0] if len(v) == 1 else list(v) for k, v in self._data.items()}
