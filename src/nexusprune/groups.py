"""Resolve the groups to process from command-line arguments."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

FILE_MARKER = "@"


class GroupSourceError(ValueError):
    """Raised when the group arguments cannot be resolved."""


def read_groups(path: Path) -> List[str]:
    """Return one group per non-blank line of ``path``."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GroupSourceError(f"cannot read group file {path}: {exc}") from exc
    return [line.strip() for line in text.splitlines() if line.strip()]


def resolve_groups(arguments: Sequence[str]) -> List[str]:
    """Return literal groups, or the contents of a single ``@filename``."""

    if not arguments:
        raise GroupSourceError("at least one group or @filename is required")
    first = arguments[0]
    if first.startswith(FILE_MARKER):
        if len(arguments) > 1:
            raise GroupSourceError("@filename must be the only group argument")
        groups = read_groups(Path(first[len(FILE_MARKER):]))
        if not groups:
            raise GroupSourceError(f"group file {first[len(FILE_MARKER):]} lists no groups")
        return groups
    if any(not argument.strip() for argument in arguments):
        raise GroupSourceError("group arguments must not be blank")
    return list(arguments)


__all__ = ["FILE_MARKER", "GroupSourceError", "read_groups", "resolve_groups"]
