"""
Tests for File Discovery — glob matching, classification and directory walking.
"""

from pathlib import Path

import pytest

from wcnt.core.discovery import (
    GlobSet,
    LimitsFileFound,
    LogFile,
    build_globsets,
    classify_path,
    discover_files,
)
from wcnt.core.settings_loader import load_config_from_str
from wcnt.errors import ConfigurationError


@pytest.mark.parametrize(
    "path,expected",
    [
        ("gcc.txt", True),
        ("/ci/logs/gcc.txt", True),
        ("/ci/logs/gcc.txt.bak", False),
        ("/ci/logs/not-gcc.txt", False),
    ],
)
def test_leading_double_star_may_match_nothing(path, expected):
    assert GlobSet(["**/gcc.txt"]).is_match(path) is expected


def test_star_crosses_directories():
    assert GlobSet(["/ci/*.log"]).is_match("/ci/nested/build.log")


def test_any_pattern_matches():
    globs = GlobSet(["**/*.warn", "**/gcc.txt"])
    assert globs.is_match("/a/b.warn")
    assert globs.is_match("/a/gcc.txt")
    assert not globs.is_match("/a/b.txt")


def test_empty_globset_matches_nothing():
    assert not GlobSet([]).is_match("/a/gcc.txt")


def test_build_globsets_requires_patterns():
    config = load_config_from_str("[lint]\nregex = '(?P<file>.+)'\nfiles = []\n")
    with pytest.raises(ConfigurationError, match="does not list any `files`"):
        build_globsets(config)


def test_build_globsets_honours_kind_filter(config, rust_kind):
    config.configure_kinds_to_run(["rust"])
    assert list(build_globsets(config)) == [rust_kind]


def test_classify_path(tmp_path, config, gcc_kind):
    globsets = build_globsets(config)
    assert classify_path(tmp_path / "Limits.toml", globsets) == LimitsFileFound(
        (tmp_path / "Limits.toml").resolve()
    )
    assert classify_path(tmp_path / "gcc.txt", globsets) == LogFile(
        (tmp_path / "gcc.txt").resolve(), (gcc_kind,)
    )
    assert classify_path(tmp_path / "README.md", globsets) is None


def test_one_log_file_may_belong_to_several_kinds(tmp_path):
    config = load_config_from_str(
        "[a]\nregex = '(?P<file>.+)'\nfiles = ['**/all.txt']\n"
        "[b]\nregex = '(?P<file>.+)'\nfiles = ['**/*.txt']\n"
    )
    data = classify_path(tmp_path / "all.txt", build_globsets(config))
    assert [kind.to_str(config.string_arena) for kind in data.kinds] == ["a", "b"]


def test_custom_limits_file_name(tmp_path, config):
    found = classify_path(tmp_path / "Budget.toml", build_globsets(config), "Budget.toml")
    assert isinstance(found, LimitsFileFound)


def test_discover_files(make_project, config, gcc_kind, rust_kind):
    root = make_project(
        limits={".": "", "src": "", ".hidden": ""},
        logs={
            "build/gcc.txt": "",
            "build/rust.txt": "",
            "build/other.txt": "",
            ".cache/gcc.txt": "",
            "build/.gcc.txt": "",
        },
    )

    found = discover_files(root, build_globsets(config))

    assert found == [
        LimitsFileFound(root / "Limits.toml"),
        LimitsFileFound(root / "src" / "Limits.toml"),
        LogFile(root / "build" / "gcc.txt", (gcc_kind,)),
        LogFile(root / "build" / "rust.txt", (rust_kind,)),
    ]


def test_discover_hidden_files_when_asked(make_project, config):
    root = make_project(logs={".cache/gcc.txt": ""})
    found = discover_files(root, build_globsets(config), skip_hidden=False)
    assert [f.path for f in found] == [root / ".cache" / "gcc.txt"]


def test_discover_in_empty_directory(tmp_path, config):
    assert discover_files(Path(tmp_path), build_globsets(config)) == []
