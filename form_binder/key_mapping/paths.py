"""Parsing of dotted/indexed flat keys into key paths."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from form_binder.errors import MalformedKeyError


if TYPE_CHECKING:
    from collections.abc import Iterator


class Segment(NamedTuple):
    """One step of a key path: a property name and an optional collection index."""

    name: str
    index: int | None = None

    def __str__(self) -> str:
        if self.index is None:
            return self.name
        return f"{self.name}[{self.index}]"


class KeyPath:
    """Immutable ordered sequence of segments parsed from a flat key."""

    __slots__ = ("_segments",)

    def __init__(self, segments: tuple[Segment, ...] = ()) -> None:
        self._segments = tuple(segments)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    def child(self, name: str, index: int | None = None) -> KeyPath:
        """Return this path extended by one segment."""
        return KeyPath((*self._segments, Segment(name, index)))

    def startswith(self, other: KeyPath) -> bool:
        """Return True when ``other`` is a segment-wise prefix of this path."""
        return self._segments[: len(other)] == other.segments

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __getitem__(self, position: int) -> Segment:
        return self._segments[position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._segments == other.segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __str__(self) -> str:
        return ".".join(str(segment) for segment in self._segments)

    def __repr__(self) -> str:
        return f"KeyPath({str(self)!r})"


ROOT = KeyPath()


def _parse_segment(key: str, text: str) -> Segment:
    if not text:
        raise MalformedKeyError(key, "empty segment")

    open_at = text.find("[")
    if open_at == -1:
        if "]" in text:
            raise MalformedKeyError(key, "unbalanced ']'")
        return Segment(text)

    name = text[:open_at]
    if not name:
        raise MalformedKeyError(key, "index without a property name")
    if not text.endswith("]"):
        raise MalformedKeyError(key, "unbalanced '[' or text after index")

    raw_index = text[open_at + 1 : -1]
    if "[" in raw_index or "]" in raw_index:
        raise MalformedKeyError(key, "nested or repeated index")
    if not raw_index.isdigit() or not raw_index.isascii():
        raise MalformedKeyError(key, f"index {raw_index!r} is not a non-negative integer")
    return Segment(name, int(raw_index))


def parse_key(key: str) -> KeyPath:
    """Split ``Employee.Reports[1].Name`` into an ordered key path.

    The empty key parses to the root path. Raises ``MalformedKeyError`` on
    empty segments, unbalanced brackets or a non-integer index.
    """
    if not key:
        return ROOT
    return KeyPath(tuple(_parse_segment(key, part) for part in key.split(".")))
