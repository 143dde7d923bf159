"""
Limits — Parsing, flattening, ratcheting and writing Limits.toml files.

A Limits.toml declares, per Kind, either one threshold or a table of
thresholds per category, `_` being the wildcard category:

    clang = 3

    [gcc]
    -Wbad-code = 2
    _ = inf

Limits apply to the directory subtree of the file until a deeper Limits.toml
takes over (see wcnt.core.resolver).
"""

from __future__ import annotations

import logging
import math
import tomllib
from pathlib import Path, PurePath
from typing import Any, Iterable

import toml

from wcnt.core.arena import SearchableArena
from wcnt.errors import LimitsFileError
from wcnt.models.config_models import WcntConfig
from wcnt.models.limit_models import (
    Limit,
    LimitsFile,
    NumberLimit,
    PerCategoryLimit,
    Threshold,
)
from wcnt.models.warning_models import (
    WILDCARD,
    Category,
    FinalTally,
    Kind,
    LimitsEntry,
    category_from_str,
)

logger = logging.getLogger("wcnt.limits")

BAD_LIMIT_VALUE = "Limit values can only be a positive integer or `inf`."
INFINITY = float("inf")


def to_threshold(value: Any) -> Threshold:
    """Convert a raw TOML value to a threshold. `inf` becomes None."""
    if isinstance(value, bool):
        raise LimitsFileError(None, BAD_LIMIT_VALUE)
    if isinstance(value, int) and value >= 0:
        return value
    if isinstance(value, float) and math.isinf(value) and value > 0:
        return None
    raise LimitsFileError(None, BAD_LIMIT_VALUE)


def parse_limits_file_from_str(
    config: WcntConfig,
    text: str,
    path: PurePath | None = None,
) -> LimitsFile:
    """Parse `text` in TOML format into a LimitsFile. Category names are interned."""
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise LimitsFileError(path, str(e)) from e

    categorizables = config.categorizables()
    result = LimitsFile(path=path)
    try:
        for key, value in raw.items():
            kind = config.kind_named(key)
            if kind is None:
                raise LimitsFileError(
                    None,
                    f"Referred to kind `{key}` which has not been configured in the settings.",
                )

            if isinstance(value, dict):
                if kind not in categorizables:
                    raise LimitsFileError(
                        None,
                        f"Kind `{key}` declares limits per category, "
                        "but its regex does not capture a `category`.",
                    )
                per_category = PerCategoryLimit()
                for category_str, bound in value.items():
                    category = category_from_str(category_str, config.string_arena)
                    per_category.bounds[category] = to_threshold(bound)
                result.limits[kind] = per_category
            else:
                result.limits[kind] = NumberLimit(to_threshold(value))
    except LimitsFileError as e:
        if path is None or e.path is not None:
            raise
        raise LimitsFileError(path, e.reason) from e

    return result


def parse_limits_file(config: WcntConfig, path: Path) -> LimitsFile:
    """Read and parse one Limits.toml file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise LimitsFileError(path, str(e)) from e
    return parse_limits_file_from_str(config, text, path)


def flatten_limits(
    limits_by_path: dict[PurePath, LimitsFile],
) -> dict[LimitsEntry, Threshold]:
    """Flatten every LimitsFile into a `{limits_file}:{kind}:{category} -> threshold` mapping."""
    result: dict[LimitsEntry, Threshold] = {}
    for path, limits_file in limits_by_path.items():
        for kind, limit in limits_file:
            if isinstance(limit, NumberLimit):
                result[LimitsEntry(path, kind, WILDCARD)] = limit.bound
            else:
                for category, bound in limit.bounds.items():
                    result[LimitsEntry(path, kind, category)] = bound
    return result


def update_limits(
    limits_by_path: dict[PurePath, LimitsFile],
    tally: FinalTally,
    kinds: Iterable[Kind] | None = None,
) -> dict[PurePath, LimitsFile]:
    """
    Ratchet declared thresholds down to the observed counts.

    Only done when the run has no violations. Thresholds nothing was counted
    against drop to 0. `kinds` limits the ratchet to the kinds that were
    searched (default: all). Returns updated copies of the files that
    changed; the originals are left untouched.
    """
    if tally.violations():
        logger.warning("Not updating limits: the run has violations")
        return {}

    selected = None if kinds is None else set(kinds)
    observed: dict[PurePath, set[tuple[Kind, Category]]] = {}
    copies = {path: limits_file.copy() for path, limits_file in limits_by_path.items()}
    for entry_count in tally.non_violations():
        entry = entry_count.entry
        if entry.limits_file not in copies:
            continue
        if selected is not None and entry.kind not in selected:
            continue
        observed.setdefault(entry.limits_file, set()).add((entry.kind, entry.category))
        copies[entry.limits_file].update_limit(entry_count)

    updated: dict[PurePath, LimitsFile] = {}
    for path, limits_copy in copies.items():
        limits_copy.lower_unobserved(observed.get(path, set()), selected)
        if limits_copy != limits_by_path[path]:
            updated[path] = limits_copy
    return updated


def _fallback(limit: PerCategoryLimit, category: Category, default: Threshold) -> Threshold:
    """What a category would be held to if its own line were removed."""
    if not category.is_wildcard and WILDCARD in limit.bounds:
        return limit.bounds[WILDCARD]
    return default


def prune_limit(limit: Limit, default: Threshold = 0) -> Limit:
    """
    Simplify a per-category limit before it is written back, without raising
    the threshold any category is held to.

    All zero collapses to 0, and a single non-zero category left after
    dropping the zeros collapses to that threshold. Otherwise a zero category
    is dropped only when what it falls back to (`_`, else the kind `default`)
    is 0 as well, and a table whose categories, `_` included, all share one
    threshold collapses to it.
    """
    if isinstance(limit, NumberLimit):
        return limit
    non_zero = [bound for bound in limit.bounds.values() if bound != 0]
    if not non_zero:
        return NumberLimit(0)
    if len(non_zero) == 1:
        return NumberLimit(non_zero[0])

    kept = {
        category: bound
        for category, bound in limit.bounds.items()
        if bound != 0 or _fallback(limit, category, default) != 0
    }
    if (
        len(kept) == len(limit.bounds)
        and WILDCARD in kept
        and len(set(kept.values())) == 1
    ):
        return NumberLimit(kept[WILDCARD])
    return PerCategoryLimit(kept)


def _serialize_threshold(bound: Threshold) -> int | float:
    return INFINITY if bound is None else bound


def as_serializable(
    limits_file: LimitsFile,
    arena: SearchableArena,
    defaults: dict[Kind, Threshold] | None = None,
) -> dict[str, Any]:
    """Turn a LimitsFile back into plain TOML-ready data, kinds in declaration order."""
    defaults = defaults or {}
    result: dict[str, Any] = {}
    for kind, limit in limits_file:
        limit = prune_limit(limit, defaults.get(kind, 0))
        if isinstance(limit, NumberLimit):
            result[kind.to_str(arena)] = _serialize_threshold(limit.bound)
        else:
            result[kind.to_str(arena)] = {
                category.to_str(arena): _serialize_threshold(bound)
                for category, bound in limit.bounds.items()
            }
    return result


def dump_limits_file(
    limits_file: LimitsFile,
    arena: SearchableArena,
    defaults: dict[Kind, Threshold] | None = None,
) -> str:
    return toml.dumps(as_serializable(limits_file, arena, defaults))


def write_limits_file(
    limits_file: LimitsFile,
    arena: SearchableArena,
    path: PurePath | None = None,
    defaults: dict[Kind, Threshold] | None = None,
) -> Path:
    """Write `limits_file` to `path` (default: where it was read from)."""
    target = Path(path or limits_file.path)
    target.write_text(dump_limits_file(limits_file, arena, defaults), encoding="utf-8")
    logger.info(f"Updated limits in `{target}`")
    return target
