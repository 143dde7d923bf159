"""
Threshold Checker — Compares warning counts against the declared limits.
"""

from __future__ import annotations

import logging

from wcnt.core.aggregator import Results
from wcnt.models.limit_models import Threshold
from wcnt.models.warning_models import EntryCount, FinalTally, Kind, LimitsEntry

logger = logging.getLogger("wcnt.checker")


def resolve_threshold(
    entry: LimitsEntry,
    flat_limits: dict[LimitsEntry, Threshold],
    defaults: dict[Kind, Threshold],
) -> Threshold:
    """
    Threshold for `entry`: the exact declaration, else the wildcard of the same
    file and kind, else the kind default. A kind without a default allows 0.
    """
    if entry in flat_limits:
        return flat_limits[entry]
    wildcard = entry.without_category()
    if wildcard in flat_limits:
        return flat_limits[wildcard]
    return defaults.get(entry.kind, 0)


def check_warnings_against_thresholds(
    flat_limits: dict[LimitsEntry, Threshold],
    results: Results,
    defaults: dict[Kind, Threshold],
) -> FinalTally:
    """Count the warnings of every entry and tally violations and non-violations."""
    tally = FinalTally()
    for entry, warnings in results.items():
        threshold = resolve_threshold(entry, flat_limits, defaults)
        tally.add(EntryCount(entry=entry, limit=threshold, actual=len(warnings)))
    logger.debug(
        f"Checked {len(tally)} entries: {len(tally.violations())} violations"
    )
    return tally
