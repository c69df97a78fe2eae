"""Request-scoped ordered work-list of downloaded artifacts.

The list holds at most one entry per identifier (case-insensitive). Entries
are kept in discovery order; the installer drains them tail to head.

Rediscovering a queued identifier moves it to the tail together with the
queued part of its dependency closure, laid out dependents-first. This keeps
the ordering invariant the installer relies on: whenever P declares D and
both are queued, D sits at or after P.
"""

import logging
from collections import OrderedDict
from collections.abc import Iterator

from .models import ArtifactHandle

_logging = logging.getLogger(__name__)


class WorkList:
    def __init__(self) -> None:
        self._entries: OrderedDict[str, ArtifactHandle] = OrderedDict()

    @classmethod
    def from_handles(cls, handles: list[ArtifactHandle]) -> "WorkList":
        worklist = cls()
        for handle in handles:
            worklist.append(handle)
        return worklist

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ArtifactHandle]:
        return iter(list(self._entries.values()))

    def append(self, handle: ArtifactHandle) -> None:
        if handle.key in self._entries:
            raise ValueError(f"{handle.identifier} is already queued")
        self._entries[handle.key] = handle

    def identifiers(self) -> list[str]:
        """Identifiers in discovery order."""
        return [h.identifier for h in self._entries.values()]

    def drain_order(self) -> list[ArtifactHandle]:
        """Entries in install order (tail to head)."""
        return list(reversed(self._entries.values()))

    def clear(self) -> None:
        self._entries.clear()

    def reposition(self, identifier: str) -> list[str]:
        """Move a queued identifier and its queued dependencies to the tail.

        Returns the identifiers moved, in their new order. The entry count
        never changes.
        """
        root = identifier.lower()
        if root not in self._entries:
            raise KeyError(identifier)

        postorder: list[str] = []
        seen: set[str] = set()

        def visit(key: str) -> None:
            if key in seen or key not in self._entries:
                return
            seen.add(key)
            for dep in self._entries[key].dependencies:
                visit(dep.lower())
            postorder.append(key)

        visit(root)

        moved = []
        for key in reversed(postorder):
            self._entries.move_to_end(key)
            moved.append(self._entries[key].identifier)

        _logging.debug(
            f"Repositioned {identifier} to tail",
            extra={"event": "worklist_reposition", "moved": moved},
        )
        return moved


__all__ = ["WorkList"]
