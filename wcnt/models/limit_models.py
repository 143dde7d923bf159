"""
Limit Data Models — In-memory form of a parsed Limits.toml file.

A Limit is either a single number holding for every category of a Kind, or a
number per category. Thresholds are `int | None`; None means infinite.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Iterable, Iterator, Union

from wcnt.models.warning_models import Category, EntryCount, Kind

Threshold = Union[int, None]


@dataclass
class NumberLimit:
    """One threshold for the whole Kind."""

    bound: Threshold


@dataclass
class PerCategoryLimit:
    """One threshold per Category. Only legal for categorizable kinds."""

    bounds: dict[Category, Threshold] = field(default_factory=dict)


Limit = Union[NumberLimit, PerCategoryLimit]


def lower_bound(current: Threshold, observed: int) -> Threshold:
    """Ratchet a threshold down to `observed`. Never raises it, leaves infinity alone."""
    if current is None:
        return None
    return min(current, observed)


@dataclass
class LimitsFile:
    """The contents of one Limits.toml, in declaration order."""

    path: PurePath | None = None
    limits: dict[Kind, Limit] = field(default_factory=dict)

    def __iter__(self) -> Iterator[tuple[Kind, Limit]]:
        return iter(self.limits.items())

    def __len__(self) -> int:
        return len(self.limits)

    def get_limit(self, kind: Kind) -> Limit | None:
        return self.limits.get(kind)

    def copy(self) -> LimitsFile:
        copied: dict[Kind, Limit] = {}
        for kind, limit in self.limits.items():
            if isinstance(limit, PerCategoryLimit):
                copied[kind] = PerCategoryLimit(dict(limit.bounds))
            else:
                copied[kind] = NumberLimit(limit.bound)
        return LimitsFile(path=self.path, limits=copied)

    def update_limit(self, entry_count: EntryCount) -> bool:
        """
        Lower the declared threshold for `entry_count.entry` to the observed count.

        Returns True if anything changed. Kinds this file does not declare,
        and categories it does not list, are left untouched.
        """
        entry = entry_count.entry
        limit = self.limits.get(entry.kind)
        if limit is None:
            return False

        if isinstance(limit, NumberLimit):
            if not entry.category.is_wildcard:
                return False
            new_bound = lower_bound(limit.bound, entry_count.actual)
            changed = new_bound != limit.bound
            limit.bound = new_bound
            return changed

        if entry.category not in limit.bounds:
            return False
        current = limit.bounds[entry.category]
        new_bound = lower_bound(current, entry_count.actual)
        limit.bounds[entry.category] = new_bound
        return new_bound != current

    def lower_unobserved(
        self,
        observed: set[tuple[Kind, Category]],
        kinds: Iterable[Kind] | None = None,
    ) -> bool:
        """
        Lower to 0 every threshold nothing was counted against.

        `observed` holds the (kind, category) pairs of this file that had
        warnings. A NumberLimit is lowered only when no category of its kind
        was observed. Only `kinds` are touched (default: all). Infinite
        thresholds stay infinite. Returns True if anything changed.
        """
        selected = None if kinds is None else set(kinds)
        seen_kinds = {kind for kind, _category in observed}
        changed = False
        for kind, limit in self.limits.items():
            if selected is not None and kind not in selected:
                continue
            if isinstance(limit, NumberLimit):
                if kind in seen_kinds:
                    continue
                new_bound = lower_bound(limit.bound, 0)
                changed |= new_bound != limit.bound
                limit.bound = new_bound
                continue
            for category, current in limit.bounds.items():
                if (kind, category) in observed:
                    continue
                new_bound = lower_bound(current, 0)
                changed |= new_bound != current
                limit.bounds[category] = new_bound
        return changed
