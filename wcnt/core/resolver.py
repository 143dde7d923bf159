"""
Limits Resolver — Finds the Limits.toml responsible for a culprit file.

Every warning originates at a "culprit" file, located somewhere below one or
more Limits.toml files. The responsible one is the file whose directory is
the nearest ancestor of the culprit. Directories are compared by trailing
components, so a relative culprit path still matches absolute limit paths.

Culprit paths must already use the native separator. The scanner normalises
backslashes before resolving.
"""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Iterable, Iterator

logger = logging.getLogger("wcnt.resolver")


def _ends_with(path: PurePath, suffix: PurePath) -> bool:
    """Component-wise suffix test: `foo/bar/baz` ends with `bar/baz`."""
    suffix_parts = suffix.parts
    if not suffix_parts or len(suffix_parts) > len(path.parts):
        return False
    return path.parts[-len(suffix_parts):] == suffix_parts


def _ancestors(culprit: PurePath) -> Iterator[PurePath]:
    """The culprit itself, then its parents, stopping before `.` and the root."""
    for candidate in (culprit, *culprit.parents):
        if not candidate.parts or candidate == PurePath(candidate.anchor):
            break
        yield candidate


def find_limits_for(
    limit_files: Iterable[PurePath],
    culprit: PurePath,
) -> PurePath | None:
    """
    Return the limits file whose directory is the closest ancestor of
    `culprit`, or None when the kind default should be used.

    With several candidates at the same depth the first one in
    `limit_files` wins.
    """
    limit_dirs = [(limit_file, limit_file.parent) for limit_file in limit_files]
    for ancestor in _ancestors(culprit):
        for limit_file, limit_dir in limit_dirs:
            if _ends_with(limit_dir, ancestor):
                logger.debug(
                    f"Culprit `{culprit}` should count towards limits defined in `{limit_file}`"
                )
                return limit_file
    return None


class LimitsResolver:
    """
    Memoizing wrapper around find_limits_for.

    Many warnings share one culprit file, so each scan task keeps its own
    resolver and answers repeated culprits from the cache.
    """

    def __init__(self, limit_files: Iterable[PurePath]) -> None:
        self.limit_files: tuple[PurePath, ...] = tuple(limit_files)
        self._cache: dict[PurePath, PurePath | None] = {}

    def resolve(self, culprit: PurePath) -> PurePath | None:
        try:
            return self._cache[culprit]
        except KeyError:
            found = self._cache[culprit] = find_limits_for(self.limit_files, culprit)
            return found

    @property
    def cache_size(self) -> int:
        return len(self._cache)
