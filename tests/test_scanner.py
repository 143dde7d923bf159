"""
Tests for the Log Scanner — regex captures, culprit normalisation and malformed captures.
"""

import re
from pathlib import PurePath

import pytest

from conftest import gcc_line
from wcnt.core.scanner import normalize_culprit, read_log_file, scan_log_text
from wcnt.errors import MalformedCaptureError
from wcnt.models.warning_models import WILDCARD, LimitsEntry, SpecificCategory

LIMITS = PurePath("/src/Limits.toml")


def scan(config, kind, text, limit_files=(LIMITS,)):
    return scan_log_text(text, kind, config.get(kind).regex, list(limit_files))


def test_captures_all_groups(config, gcc_kind):
    text = gcc_line("/src/lib/a.c", 12, 4, "this is bad", "-Wbad-code")
    result = scan(config, gcc_kind, text)

    assert result.num_warnings == 1
    [(entry, warnings)] = result.warnings.items()
    [warning] = warnings
    arena = result.string_arena
    assert entry == LimitsEntry(LIMITS, gcc_kind, SpecificCategory(arena.get_id("-Wbad-code")))
    assert warning.culprit == PurePath("/src/lib/a.c")
    assert (warning.line, warning.column) == (12, 4)
    assert warning.category.to_str(arena) == "-Wbad-code"
    assert warning.description_str(arena) == "this is bad"


def test_groups_per_category(config, gcc_kind):
    text = "\n".join(
        [
            gcc_line("/src/a.c", 1, 1, "one", "-Wbad-code"),
            gcc_line("/src/a.c", 2, 1, "two", "-Wbad-code"),
            gcc_line("/src/b.c", 3, 1, "three", "-Wpedantic"),
        ]
    )
    result = scan(config, gcc_kind, text)
    counts = {entry.category.to_str(result.string_arena): len(w) for entry, w in result.warnings.items()}
    assert counts == {"-Wbad-code": 2, "-Wpedantic": 1}


def test_repeated_warning_is_counted_once(config, gcc_kind):
    line = gcc_line("/src/a.c", 1, 1, "same", "-Wbad-code")
    result = scan(config, gcc_kind, f"{line}\n{line}\n")
    assert result.num_warnings == 1


def test_different_descriptions_count_separately(config, gcc_kind):
    text = "\n".join(
        [
            gcc_line("/src/a.c", 1, 1, "first message", "-Wbad-code"),
            gcc_line("/src/a.c", 1, 1, "second message", "-Wbad-code"),
        ]
    )
    assert scan(config, gcc_kind, text).num_warnings == 2


def test_without_limits_file_the_entry_is_the_wildcard(config, gcc_kind):
    text = gcc_line("/elsewhere/a.c", 1, 1, "bad", "-Wbad-code")
    result = scan(config, gcc_kind, text)
    [(entry, warnings)] = result.warnings.items()
    assert entry == LimitsEntry(None, gcc_kind, WILDCARD)
    # The warning keeps the category it was reported with
    [warning] = warnings
    assert warning.category.to_str(result.string_arena) == "-Wbad-code"


def test_multiline_regex_without_category(config, rust_kind):
    text = (
        "   Compiling wcnt v0.4.0\n"
        "warning: unused variable: `x`\n"
        "  --> /src/main.rs:10:9\n"
        "   |\n"
        "warning: unused import\n"
        "  --> /src/lib.rs:1:5\n"
    )
    result = scan(config, rust_kind, text)
    [(entry, warnings)] = result.warnings.items()
    assert entry == LimitsEntry(LIMITS, rust_kind, WILDCARD)
    assert sorted(str(w.culprit) for w in warnings) == ["/src/lib.rs", "/src/main.rs"]
    assert all(w.category is WILDCARD for w in warnings)


def test_windows_separators_are_normalised():
    assert normalize_culprit(r"src\lib\a.c") == PurePath("src/lib/a.c")


def test_backslash_culprit_resolves_limits(config, gcc_kind):
    text = gcc_line(r"\src\lib\a.c", 1, 1, "bad", "-Wbad-code")
    [entry] = scan(config, gcc_kind, text).warnings
    assert entry.limits_file == LIMITS


def test_zero_line_is_malformed(config, gcc_kind):
    with pytest.raises(MalformedCaptureError, match="`line`") as excinfo:
        scan(config, gcc_kind, gcc_line("/src/a.c", 0, 1, "bad", "-Wbad-code"))
    assert excinfo.value.value == "0"


def test_non_ascii_digits_are_malformed(config, gcc_kind):
    with pytest.raises(MalformedCaptureError, match="`column`"):
        scan(config, gcc_kind, gcc_line("/src/a.c", 1, "٣", "bad", "-Wbad-code"))


def test_non_numeric_capture_is_malformed(gcc_kind):
    regex = re.compile(r"^(?P<file>\S+) at (?P<line>\S+)$", re.MULTILINE)
    with pytest.raises(MalformedCaptureError, match="not a non zero number: `twelve`"):
        scan_log_text("/src/a.c at twelve", gcc_kind, regex, [LIMITS])


def test_optional_groups_may_be_absent(gcc_kind):
    regex = re.compile(r"^WARN (?P<file>\S+)$", re.MULTILINE)
    result = scan_log_text("WARN /src/a.c\nINFO /src/b.c\n", gcc_kind, regex, [LIMITS])
    [warning] = next(iter(result.warnings.values()))
    assert warning.line is None
    assert warning.column is None
    assert warning.description is None
    assert warning.category is WILDCARD


def test_no_matches(config, gcc_kind):
    assert scan(config, gcc_kind, "all good\n").warnings == {}


def test_read_log_file_replaces_bad_bytes(tmp_path):
    path = tmp_path / "gcc.txt"
    path.write_bytes(b"ok \xff\xfe bytes\n")
    assert read_log_file(path).startswith("ok ")
