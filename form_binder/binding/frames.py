"""Binding frames and the recursion guard that bounds their nesting."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final


if TYPE_CHECKING:
    from collections.abc import Iterator

    from form_binder.key_mapping import KeyPath


class _Unbound:
    def __repr__(self) -> str:
        return "UNBOUND"


# Returned in place of an instance when a child frame was refused or its identity did not resolve.
UNBOUND: Final = _Unbound()


@dataclass(slots=True)
class BindingFrame:
    """One in-progress (type, prefix, instance) unit of recursive binding.

    The frame owns ``instance`` until it is handed back to the parent frame,
    which assigns it to the corresponding property.
    """

    target: type
    prefix: KeyPath
    instance: Any = None
    depth: int = 0

    def child(self, target: type, prefix: KeyPath) -> BindingFrame:
        return BindingFrame(target, prefix, depth=self.depth + 1)


class RecursionGuard:
    """Track (type, prefix) pairs open on the active binding path."""

    def __init__(self, max_depth: int) -> None:
        super().__init__()
        self._max_depth = max_depth
        self._open: set[tuple[type, KeyPath]] = set()

    def refusal(self, frame: BindingFrame) -> str | None:
        """Return why frame may not be opened, or None when it may."""
        if frame.depth > self._max_depth:
            return f"nesting deeper than {self._max_depth} levels"
        if (frame.target, frame.prefix) in self._open:
            return f"{frame.target.__name__} at {frame.prefix} is already being bound"
        return None

    @contextmanager
    def entered(self, frame: BindingFrame) -> Iterator[BindingFrame]:
        marker = (frame.target, frame.prefix)
        self._open.add(marker)
        try:
            yield frame
        finally:
            self._open.discard(marker)
