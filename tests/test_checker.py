"""
Tests for the Threshold Checker — fallback chain and end-to-end counting.
"""

from pathlib import PurePath

import pytest

from conftest import gcc_line
from wcnt.core.aggregator import gather_results_from_logs, remap_to_actual_limit_entries
from wcnt.core.checker import check_warnings_against_thresholds, resolve_threshold
from wcnt.core.limits import flatten_limits, parse_limits_file_from_str
from wcnt.core.scanner import scan_log_text
from wcnt.models.warning_models import (
    WILDCARD,
    EntryCount,
    FinalTally,
    LimitsEntry,
    SpecificCategory,
)

LIMITS = PurePath("/src/Limits.toml")


def category(config, name):
    return SpecificCategory(config.string_arena.get_or_insert(name))


def test_exact_entry_wins(config, gcc_kind):
    entry = LimitsEntry(LIMITS, gcc_kind, category(config, "-Wbad-code"))
    flat = {entry: 3, entry.without_category(): 7}
    assert resolve_threshold(entry, flat, config.defaults()) == 3


def test_falls_back_to_wildcard_of_same_file(config, gcc_kind):
    entry = LimitsEntry(LIMITS, gcc_kind, category(config, "-Wpedantic"))
    flat = {entry.without_category(): 7}
    assert resolve_threshold(entry, flat, config.defaults()) == 7


def test_wildcard_of_other_file_does_not_apply(config, gcc_kind):
    entry = LimitsEntry(LIMITS, gcc_kind, category(config, "-Wpedantic"))
    flat = {LimitsEntry(PurePath("/other/Limits.toml"), gcc_kind, WILDCARD): 7}
    assert resolve_threshold(entry, flat, config.defaults()) == 0


def test_falls_back_to_kind_default(config, rust_kind):
    entry = LimitsEntry(None, rust_kind, WILDCARD)
    assert resolve_threshold(entry, {}, config.defaults()) == 2


def test_kind_without_default_allows_nothing(config, gcc_kind):
    entry = LimitsEntry(None, gcc_kind, WILDCARD)
    assert resolve_threshold(entry, {}, {}) == 0


def test_infinite_threshold_never_violates():
    count = EntryCount(entry=None, limit=None, actual=10_000)
    assert not count.is_violation


def run_gcc(config, limits_toml, log_text):
    limits = {LIMITS: parse_limits_file_from_str(config, limits_toml, LIMITS)}
    flat = flatten_limits(limits)
    kind = config.kind_named("gcc")
    search_result = scan_log_text(log_text, kind, config.get(kind).regex, [LIMITS])
    found = gather_results_from_logs(config.string_arena, [search_result])
    results = remap_to_actual_limit_entries(flat, found)
    return check_warnings_against_thresholds(flat, results, config.defaults())


@pytest.mark.parametrize("occurrences,violated", [(2, True), (1, False)])
def test_end_to_end_category_limit(config, gcc_kind, occurrences, violated):
    log = "\n".join(
        gcc_line(f"/src/file{n}.c", n + 1, 1, "bad code", "-Wbad-code") for n in range(occurrences)
    )
    tally = run_gcc(config, "[gcc]\n-Wbad-code = 1\n", log)

    expected = EntryCount(
        entry=LimitsEntry(LIMITS, gcc_kind, category(config, "-Wbad-code")),
        limit=1,
        actual=occurrences,
    )
    if violated:
        assert tally.violations() == [expected]
        assert tally.non_violations() == []
    else:
        assert tally.violations() == []
        assert tally.non_violations() == [expected]


def test_end_to_end_undeclared_category_uses_wildcard(config, gcc_kind):
    log = "\n".join(
        [
            gcc_line("/src/a.c", 1, 1, "bad", "-Wbad-code"),
            gcc_line("/src/b.c", 1, 1, "loud", "-Wpedantic"),
            gcc_line("/src/c.c", 1, 1, "louder", "-Wextra"),
        ]
    )
    tally = run_gcc(config, "[gcc]\n-Wbad-code = 1\n_ = 1\n", log)

    [violation] = tally.violations()
    assert violation.entry == LimitsEntry(LIMITS, gcc_kind, WILDCARD)
    assert (violation.actual, violation.limit) == (2, 1)
    [ok] = tally.non_violations()
    assert ok.entry.category == category(config, "-Wbad-code")


def test_end_to_end_number_limit_covers_all_categories(config, gcc_kind):
    log = "\n".join(
        [
            gcc_line("/src/a.c", 1, 1, "bad", "-Wbad-code"),
            gcc_line("/src/b.c", 1, 1, "loud", "-Wpedantic"),
        ]
    )
    tally = run_gcc(config, "gcc = 2\n", log)

    assert tally.violations() == []
    [ok] = tally.non_violations()
    assert ok.entry == LimitsEntry(LIMITS, gcc_kind, WILDCARD)
    assert ok.actual == 2


def test_end_to_end_without_limits_file_uses_default(config, gcc_kind):
    tally = run_gcc(config, "gcc = inf\n", gcc_line("/elsewhere/a.c", 1, 1, "bad", "-Wbad-code"))

    [violation] = tally.violations()
    assert violation.entry == LimitsEntry(None, gcc_kind, WILDCARD)
    assert (violation.actual, violation.limit) == (1, 0)


def test_tally_lists_are_sorted(config, gcc_kind, rust_kind):
    later = PurePath("/src/lib/Limits.toml")
    tally = FinalTally()
    for entry_count in [
        EntryCount(LimitsEntry(later, rust_kind, WILDCARD), 0, 1),
        EntryCount(LimitsEntry(LIMITS, rust_kind, WILDCARD), 0, 3),
        EntryCount(LimitsEntry(LIMITS, gcc_kind, category(config, "-Wb")), 5, 1),
        EntryCount(LimitsEntry(LIMITS, gcc_kind, WILDCARD), 5, 1),
        EntryCount(LimitsEntry(None, gcc_kind, WILDCARD), 0, 2),
    ]:
        tally.add(entry_count)

    assert [ec.actual for ec in tally.violations()] == [2, 3, 1]
    assert [ec.entry.category for ec in tally.non_violations()] == [
        WILDCARD,
        category(config, "-Wb"),
    ]
    assert len(tally) == 5
