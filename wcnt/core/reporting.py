"""
Reporting — Human-readable rendering of entries, counts and warnings.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Callable

from wcnt.config import settings
from wcnt.core.aggregator import Results
from wcnt.core.arena import SearchableArena
from wcnt.models.config_models import WcntConfig
from wcnt.models.limit_models import LimitsFile, NumberLimit, Threshold
from wcnt.models.warning_models import CountsTowardsLimit, EntryCount, LimitsEntry


def display_path(path: PurePath, keep: int | None = None) -> str:
    """Long paths are shortened to `.../` plus their last `keep` components."""
    keep = keep or settings.display_path_components
    parts = path.parts
    if len(parts) > keep + 1:
        return str(PurePath("...", *parts[-keep:]))
    return str(path)


def display_entry(entry: LimitsEntry, arena: SearchableArena, keep: int | None = None) -> str:
    path = "_" if entry.limits_file is None else display_path(entry.limits_file, keep)
    return f"{path}:[{entry.kind.to_str(arena)}/{entry.category.to_str(arena)}]"


def display_entry_count(
    entry_count: EntryCount, arena: SearchableArena, keep: int | None = None
) -> str:
    entry = display_entry(entry_count.entry, arena, keep)
    if entry_count.limit is None:
        return f"{entry} ({entry_count.actual} < inf)"
    op = ">" if entry_count.is_violation else "<="
    return f"{entry} ({entry_count.actual} {op} {entry_count.limit})"


def display_warning(warning: CountsTowardsLimit, arena: SearchableArena) -> str:
    line = "?" if warning.line is None else warning.line
    column = "?" if warning.column is None else warning.column
    text = f"{warning.culprit}:{line}:{column}"
    description = warning.description_str(arena)
    if description is not None:
        text += f": {description}"
    if not warning.category.is_wildcard:
        text += f" [{warning.category.to_str(arena)}]"
    return text


def _threshold_str(bound: Threshold) -> str:
    return "inf" if bound is None else str(bound)


def display_limits_file(limits_file: LimitsFile, arena: SearchableArena) -> str:
    lines = ["LimitsFile {"]
    for kind, limit in limits_file:
        if isinstance(limit, NumberLimit):
            lines.append(f"{kind.to_str(arena)} = {_threshold_str(limit.bound)}")
        else:
            lines.append(f"[{kind.to_str(arena)}]")
            for category, bound in limit.bounds.items():
                lines.append(f"{category.to_str(arena)} = {_threshold_str(bound)}")
    lines.append("}")
    return "\n".join(lines)


def display_config(config: WcntConfig) -> str:
    lines = ["Settings {"]
    for kind, kind_config in config.iter():
        lines.append(f"[{kind.to_str(config.string_arena)}]")
        lines.append(f"regex = {kind_config.regex.pattern!r}")
        lines.append(f"files = [{', '.join(kind_config.files)}]")
    lines.append("}")
    return "\n".join(lines)


def report_violations(
    arena: SearchableArena,
    results: Results,
    violations: list[EntryCount],
    non_violations: list[EntryCount],
    verbosity: int,
    echo: Callable[[str], None] = print,
) -> None:
    """
    Print the tally. One `-v` lists violations, two also list the
    non-violations and every warning behind each violation.
    """
    if verbosity > 1:
        for entry_count in non_violations:
            echo(display_entry_count(entry_count, arena))
    if verbosity > 0:
        for entry_count in violations:
            echo(display_entry_count(entry_count, arena))
            if verbosity > 1:
                warnings = sorted(results.get(entry_count.entry, ()), key=CountsTowardsLimit.sort_key)
                for warning in warnings:
                    echo(f"  => {display_warning(warning, arena)}")
