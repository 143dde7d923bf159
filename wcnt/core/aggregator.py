"""
Aggregator — Merges per-scan results into the global arena.

Scans finish in any order. Each result brings its own string arena, which is
merged into the global arena before its categories and descriptions are
remapped. Warnings are then unioned per LimitsEntry, so the same warning found
by two scans counts once.

Only ever called from one thread. Merging is commutative and idempotent.
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from wcnt.core.arena import SearchableArena
from wcnt.core.scanner import LogSearchResults
from wcnt.errors import LogReadError
from wcnt.models.limit_models import Threshold
from wcnt.models.warning_models import CountsTowardsLimit, LimitsEntry

logger = logging.getLogger("wcnt.aggregator")

Results = dict[LimitsEntry, set[CountsTowardsLimit]]


def process_search_results(arena: SearchableArena, search_result: LogSearchResults) -> Results:
    """Remap one scan's entries and warnings from its local arena into `arena`."""
    incoming_arena = search_result.string_arena
    arena.merge_from(incoming_arena)

    results: Results = {}
    for limits_entry, warnings in search_result.warnings.items():
        entry = limits_entry.remap(incoming_arena, arena)
        results.setdefault(entry, set()).update(
            w.remap(incoming_arena, arena) for w in warnings
        )
    return results


def merge_results(into: Results, more: Results) -> Results:
    """Union `more` into `into`, per LimitsEntry."""
    for entry, warnings in more.items():
        into.setdefault(entry, set()).update(warnings)
    return into


def gather_results_from_logs(
    arena: SearchableArena,
    search_results: Iterable[Union[LogSearchResults, LogReadError]],
    read_errors: list[LogReadError] | None = None,
) -> Results:
    """
    Consume scan results, removing duplicates and grouping warnings per
    LimitsEntry. Unreadable log files are logged and skipped.
    """
    results: Results = {}
    for search_result in search_results:
        if isinstance(search_result, LogReadError):
            logger.warning(str(search_result))
            if read_errors is not None:
                read_errors.append(search_result)
            continue
        merge_results(results, process_search_results(arena, search_result))
    return results


def remap_to_actual_limit_entries(
    defined_limits: dict[LimitsEntry, Threshold],
    found: Results,
) -> Results:
    """
    Re-key entries to the limits the user actually declared.

    Warnings are keyed by the category the regex observed. When the limits
    file has no threshold for that category, the warnings count towards the
    wildcard entry of the same file and kind, if declared. Otherwise the entry
    is kept and later compared with the kind default.
    """
    result: Results = {}
    for entry, warnings in found.items():
        if entry in defined_limits:
            key = entry
        elif entry.without_category() in defined_limits:
            key = entry.without_category()
        else:
            key = entry
        result.setdefault(key, set()).update(warnings)
    return result
