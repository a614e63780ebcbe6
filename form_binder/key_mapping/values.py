"""Ordered multimap of submitted form keys and values."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing_extensions import override
from urllib.parse import parse_qsl


class FlatValueSet(Mapping[str, Sequence[str]]):
    """Ordered multimap from flat key to all of its submitted values.

    Key order is first-insertion order and the order of repeated values is
    preserved; both are significant for collection binding.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        super().__init__()
        self._data: dict[str, list[str]] = {}
        for key, value in pairs:
            self.add(key, value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, str | Sequence[str]]) -> FlatValueSet:
        """Build from a mapping whose values are a string or a sequence of strings."""
        values = cls()
        for key, value in data.items():
            if isinstance(value, str):
                values.add(key, value)
                continue
            for item in value:
                values.add(key, item)
        return values

    @classmethod
    def from_query_string(cls, query: str) -> FlatValueSet:
        """Build from a URL-encoded query string, keeping blank values."""
        return cls(parse_qsl(query.removeprefix("?"), keep_blank_values=True))

    def add(self, key: str, value: str) -> None:
        """Append one value for key."""
        if not isinstance(value, str):
            msg = f"values must be strings, got {type(value).__name__} for {key!r}"
            raise TypeError(msg)
        self._data.setdefault(key, []).append(value)

    def getall(self, key: str) -> list[str]:
        """Return every value submitted for key, in submission order."""
        return list(self._data.get(key, ()))

    def getfirst(self, key: str) -> str | None:
        """Return the first value submitted for key, or None."""
        values = self._data.get(key)
        if not values:
            return None
        return values[0]

    def pairs(self) -> Iterator[tuple[str, str]]:
        """Iterate over ``(key, value)`` pairs in insertion order."""
        for key, values in self._data.items():
            for value in values:
                yield key, value

    @override
    def __getitem__(self, key: str) -> Sequence[str]:
        return tuple(self._data[key])

    @override
    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    @override
    def __len__(self) -> int:
        return len(self._data)

    @override
    def __repr__(self) -> str:
        return f"FlatValueSet({list(self.pairs())!r})"
