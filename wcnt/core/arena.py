"""
String Arena — Append-only interned strings with stable integer handles.

Kinds, categories and descriptions are stored once and referred to by Handle.
Every scan task owns a private arena; the worker merges them into the global
arena afterwards, on a single thread. Handles carry the id of the arena that
issued them, so presenting one to the wrong arena fails loudly instead of
resolving to an unrelated string.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterator

from wcnt.errors import ForeignHandleError

_arena_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class Handle:
    """Reference to one insertion inside one arena."""

    arena_id: int
    index: int


class SearchableArena:
    """
    A string arena that is also searchable: a string already present can be
    turned back into its handle.

    `insert` always appends, while the reverse map keeps the latest handle for
    a value. `get_or_insert` is the deduplicating entry point.
    """

    def __init__(self) -> None:
        self.arena_id = next(_arena_ids)
        self._strings: list[str] = []
        self._mapping: dict[str, Handle] = {}

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[tuple[Handle, str]]:
        for index, value in enumerate(self._strings):
            yield Handle(self.arena_id, index), value

    def __repr__(self) -> str:
        return f"SearchableArena(id={self.arena_id}, size={len(self._strings)})"

    def owns(self, handle: Handle) -> bool:
        return handle.arena_id == self.arena_id and 0 <= handle.index < len(self._strings)

    def insert(self, value: str) -> Handle:
        handle = Handle(self.arena_id, len(self._strings))
        self._strings.append(value)
        self._mapping[value] = handle
        return handle

    def get_id(self, value: str) -> Handle | None:
        return self._mapping.get(value)

    def lookup(self, handle: Handle) -> str:
        """Resolve a handle. Raises ForeignHandleError for another arena's handle."""
        if not self.owns(handle):
            raise ForeignHandleError(
                f"Handle {handle} was not issued by arena {self.arena_id}. "
                "Remap it with translate() first."
            )
        return self._strings[handle.index]

    def get_or_insert(self, value: str) -> Handle:
        handle = self._mapping.get(value)
        if handle is None:
            handle = self.insert(value)
        return handle

    def merge_from(self, other: SearchableArena) -> None:
        """Intern every string of `other`, in its insertion order."""
        for _handle, value in other:
            self.get_or_insert(value)

    def translate(self, handle: Handle, source: SearchableArena) -> Handle:
        """Remap a handle issued by `source` into this arena."""
        if source is self:
            return handle
        return self.get_or_insert(source.lookup(handle))
