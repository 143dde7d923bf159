"""
Log Scanner — Searches one log file for the warnings of one Kind.

Each scan owns a private string arena and result map, so scans of different
(log file, kind) pairs share nothing mutable and can run in parallel. The
worker merges the results into the global arena afterwards.

Regex capture groups:
  file         required, the culprit file
  line, column optional, positive integers
  category     optional, missing means the wildcard category
  description  optional
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable

from wcnt.core.arena import SearchableArena
from wcnt.core.resolver import LimitsResolver
from wcnt.errors import MalformedCaptureError
from wcnt.models.warning_models import (
    WILDCARD,
    CountsTowardsLimit,
    Kind,
    LimitsEntry,
    SpecificCategory,
)

logger = logging.getLogger("wcnt.scanner")

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class LogSearchResults:
    """
    What one scan found. `string_arena` is local to the scan: the handles of
    categories and descriptions in `warnings` must be remapped before they are
    compared with anything from another arena.
    """

    string_arena: SearchableArena = field(default_factory=SearchableArena)
    warnings: dict[LimitsEntry, set[CountsTowardsLimit]] = field(default_factory=dict)
    log_file: Path | None = None
    kind: Kind | None = None

    @property
    def num_warnings(self) -> int:
        return sum(len(w) for w in self.warnings.values())


def normalize_culprit(raw: str) -> PurePath:
    """Turn a captured file name into a native path. Windows separators become `/`."""
    return PurePath(raw.replace("\\", "/"))


def _positive_int(match: re.Match, group: str, log_file: Path | None) -> int | None:
    value = match.group(group) if group in match.re.groupindex else None
    if value is None:
        return None
    if not _DIGITS.fullmatch(value) or int(value) == 0:
        raise MalformedCaptureError(group, value, log_file)
    return int(value)


def _optional_group(match: re.Match, group: str) -> str | None:
    if group not in match.re.groupindex:
        return None
    return match.group(group)


def scan_log_text(
    text: str,
    kind: Kind,
    regex: re.Pattern,
    limit_files: Iterable[PurePath] | LimitsResolver,
    log_file: Path | None = None,
) -> LogSearchResults:
    """
    Search `text` with `regex` and map every match to the LimitsEntry of the
    Limits.toml responsible for its culprit.

    Raises MalformedCaptureError when `line` or `column` is not a positive number.
    """
    result = LogSearchResults(log_file=log_file, kind=kind)
    arena = result.string_arena
    if isinstance(limit_files, LimitsResolver):
        resolver = limit_files
    else:
        resolver = LimitsResolver(limit_files)

    for match in regex.finditer(text):
        raw_culprit = match.group("file")
        if raw_culprit is None:
            logger.warning(f"Match without a `file` capture in `{log_file}`: {match.group(0)!r}")
            continue
        culprit = normalize_culprit(raw_culprit)
        line = _positive_int(match, "line", log_file)
        column = _positive_int(match, "column", log_file)
        category_str = _optional_group(match, "category")
        description_str = _optional_group(match, "description")

        limits_file = resolver.resolve(culprit)

        category = (
            SpecificCategory(arena.get_or_insert(category_str))
            if category_str is not None
            else WILDCARD
        )
        description = (
            arena.get_or_insert(description_str) if description_str is not None else None
        )
        # Without a limits file the kind default applies to every category
        category_to_match = category if limits_file is not None else WILDCARD
        limits_entry = LimitsEntry(limits_file, kind, category_to_match)
        warning = CountsTowardsLimit(
            culprit=culprit,
            line=line,
            column=column,
            kind=kind,
            category=category,
            description=description,
        )
        result.warnings.setdefault(limits_entry, set()).add(warning)

    logger.debug(
        f"Found {result.num_warnings} warnings in `{log_file or '<text>'}` "
        f"({resolver.cache_size} distinct culprits)"
    )
    return result


def read_log_file(path: Path) -> str:
    """Read a whole log file. Undecodable bytes are replaced rather than fatal."""
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()
