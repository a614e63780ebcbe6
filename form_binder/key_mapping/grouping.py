"""Index of parsed flat keys, grouped by the segments below a prefix."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from form_binder.errors import MalformedKeyError

from .paths import KeyPath, parse_key


if TYPE_CHECKING:
    from .values import FlatValueSet


@dataclass(frozen=True, slots=True)
class ParsedEntry:
    """A flat key, its parsed path and every value submitted for it."""

    key: str
    path: KeyPath
    values: tuple[str, ...]


class KeyIndex:
    """Parsed view over a ``FlatValueSet`` used by one bind call.

    Every key is parsed exactly once and filed under its exact path, every
    prefix of that path, and every ``(prefix, next segment name)`` pair, so
    the lookups below never scan the whole key set. Malformed keys are kept
    aside in ``malformed`` so the caller can report them.
    """

    def __init__(self, values: FlatValueSet) -> None:
        super().__init__()
        self.entries: list[ParsedEntry] = []
        self.malformed: list[MalformedKeyError] = []
        self._by_path: dict[KeyPath, list[ParsedEntry]] = defaultdict(list)
        self._by_child: dict[tuple[KeyPath, str], list[ParsedEntry]] = defaultdict(list)
        self._prefixes: set[KeyPath] = set()
        for key, submitted in values.items():
            try:
                path = parse_key(key)
            except MalformedKeyError as error:
                self.malformed.append(error)
                continue
            self._file(ParsedEntry(key, path, tuple(submitted)))

    def _file(self, entry: ParsedEntry) -> None:
        self.entries.append(entry)
        self._by_path[entry.path].append(entry)
        segments = entry.path.segments
        for depth in range(len(segments) + 1):
            prefix = KeyPath(segments[:depth])
            self._prefixes.add(prefix)
            if depth < len(segments):
                self._by_child[prefix, segments[depth].name].append(entry)

    def has_prefix(self, prefix: KeyPath) -> bool:
        """Return True when at least one key lives at or below prefix."""
        return prefix in self._prefixes

    def values_at(self, path: KeyPath) -> list[str]:
        """Return values whose key parses exactly to path, in submission order."""
        return [value for entry in self._by_path.get(path, ()) for value in entry.values]

    def key_at(self, path: KeyPath) -> str:
        """Return the raw key spelling for path, falling back to its rendering."""
        found = self._by_path.get(path)
        return found[0].key if found else str(path)

    def under(self, prefix: KeyPath, name: str) -> list[ParsedEntry]:
        """Return entries whose segment right after prefix is named ``name``."""
        return list(self._by_child.get((prefix, name), ()))

    def has_property(self, prefix: KeyPath, name: str) -> bool:
        """Return True when any key addresses property ``name`` below prefix."""
        return (prefix, name) in self._by_child

    def indexed_groups(self, prefix: KeyPath, name: str) -> dict[int, list[ParsedEntry]]:
        """Group ``<prefix>.<name>[i]...`` entries by index, in ascending index order."""
        depth = len(prefix)
        grouped: dict[int, list[ParsedEntry]] = defaultdict(list)
        for entry in self._by_child.get((prefix, name), ()):
            index = entry.path[depth].index
            if index is not None:
                grouped[index].append(entry)
        return {index: grouped[index] for index in sorted(grouped)}
