"""Interface for ``python -m form_binder``."""

from __future__ import annotations

from argparse import ArgumentParser
from typing import TYPE_CHECKING

from ._version import version
from .errors import MalformedKeyError
from .key_mapping import parse_key


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = ["main"]


def main(args: Sequence[str] | None = None) -> int:
    """Print the parsed path of each flat key given on the command line."""
    parser = ArgumentParser(prog="form-binder", description="Inspect how flat form keys are parsed.")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument("keys", nargs="*", metavar="KEY", help="flat key such as Employee.Reports[1].Name")
    options = parser.parse_args(args)

    status = 0
    for key in options.keys:
        try:
            path = parse_key(key)
        except MalformedKeyError as error:
            print(f"{key}\terror: {error.reason}")
            status = 1
            continue
        rendered = " / ".join(
            segment.name if segment.index is None else f"{segment.name} [{segment.index}]" for segment in path
        )
        print(f"{key}\t{rendered or '<root>'}")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
