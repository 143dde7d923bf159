"""
Warning Data Models — Kinds, categories, limit entries and observed warnings.

These are hashable value objects: scan tasks use them as dict keys and set
members, and the aggregator unions them across tasks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import ClassVar, Union

from wcnt.core.arena import Handle, SearchableArena


@dataclass(frozen=True, slots=True)
class Kind:
    """A kind of warnings, all matchable with the same regular expression."""

    handle: Handle

    def to_str(self, arena: SearchableArena) -> str:
        return arena.lookup(self.handle)

    def sort_key(self) -> tuple[int, int]:
        return (self.handle.arena_id, self.handle.index)


@dataclass(frozen=True, slots=True)
class SpecificCategory:
    """A named category of warnings below a Kind, e.g. `-Wunused-value` or `F401`."""

    handle: Handle
    is_wildcard: ClassVar[bool] = False

    def to_str(self, arena: SearchableArena) -> str:
        return arena.lookup(self.handle)

    def remap(self, source: SearchableArena, dest: SearchableArena) -> SpecificCategory:
        return SpecificCategory(dest.translate(self.handle, source))

    def sort_key(self) -> tuple[int, ...]:
        return (1, self.handle.index)


@dataclass(frozen=True, slots=True)
class WildcardCategory:
    """The `_` category. Matches every category not declared explicitly."""

    is_wildcard: ClassVar[bool] = True

    def to_str(self, arena: SearchableArena) -> str:
        return "_"

    def remap(self, source: SearchableArena, dest: SearchableArena) -> WildcardCategory:
        return self

    def sort_key(self) -> tuple[int, ...]:
        return (0,)


Category = Union[SpecificCategory, WildcardCategory]

WILDCARD = WildcardCategory()
WILDCARD_STR = "_"


def category_from_str(value: str, arena: SearchableArena) -> Category:
    if value == WILDCARD_STR:
        return WILDCARD
    return SpecificCategory(arena.get_or_insert(value))


def _optional_key(value: int | None) -> tuple[bool, int]:
    # Missing values sort first
    return (value is not None, value or 0)


@dataclass(frozen=True, slots=True)
class LimitsEntry:
    """
    Shorthand for a single numerical threshold within the system.

    A limit is uniquely identified by the Limits.toml file declaring it, a
    Kind and a Category. `limits_file` is None when no Limits.toml applies and
    the kind default is used instead.
    """

    limits_file: PurePath | None
    kind: Kind
    category: Category = WILDCARD

    def without_category(self) -> LimitsEntry:
        return LimitsEntry(self.limits_file, self.kind, WILDCARD)

    def remap(self, source: SearchableArena, dest: SearchableArena) -> LimitsEntry:
        return LimitsEntry(self.limits_file, self.kind, self.category.remap(source, dest))

    def sort_key(self) -> tuple:
        path_key = (self.limits_file is not None, str(self.limits_file or ""))
        return (path_key, self.kind.sort_key(), self.category.sort_key())


@dataclass(frozen=True, slots=True)
class CountsTowardsLimit:
    """
    A warning is anything that counts towards a limit.

    Identity covers every field, description included, so two different
    messages reported at the same place count twice.
    """

    culprit: PurePath
    line: int | None
    column: int | None
    kind: Kind
    category: Category = WILDCARD
    description: Handle | None = None

    def remap(self, source: SearchableArena, dest: SearchableArena) -> CountsTowardsLimit:
        description = self.description
        if description is not None:
            description = dest.translate(description, source)
        return CountsTowardsLimit(
            culprit=self.culprit,
            line=self.line,
            column=self.column,
            kind=self.kind,
            category=self.category.remap(source, dest),
            description=description,
        )

    def description_str(self, arena: SearchableArena) -> str | None:
        if self.description is None:
            return None
        return arena.lookup(self.description)

    def sort_key(self) -> tuple:
        return (str(self.culprit), _optional_key(self.line), _optional_key(self.column))


@dataclass(slots=True)
class EntryCount:
    """A LimitsEntry paired with its threshold (None = infinite) and the observed count."""

    entry: LimitsEntry
    limit: int | None
    actual: int

    @property
    def is_violation(self) -> bool:
        return self.limit is not None and self.actual > self.limit

    def sort_key(self) -> tuple:
        return (self.entry.sort_key(), _optional_key(self.limit), self.actual)


@dataclass
class FinalTally:
    """Every observed LimitsEntry, split into violations and everything else."""

    _violations: list[EntryCount] = field(default_factory=list)
    _others: list[EntryCount] = field(default_factory=list)

    def add(self, entry_count: EntryCount) -> None:
        if entry_count.is_violation:
            self._violations.append(entry_count)
        else:
            self._others.append(entry_count)

    def violations(self) -> list[EntryCount]:
        """Sorted by limits file, kind and category."""
        self._violations.sort(key=EntryCount.sort_key)
        return self._violations

    def non_violations(self) -> list[EntryCount]:
        self._others.sort(key=EntryCount.sort_key)
        return self._others

    def __len__(self) -> int:
        return len(self._violations) + len(self._others)
