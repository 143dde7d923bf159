"""
Test fixtures shared across all wcnt tests.
"""

from pathlib import Path

import pytest

GCC_REGEX = (
    r"^(?P<file>[^:\n]+):(?P<line>\d+):(?P<column>\d+): warning: "
    r"(?P<description>.+) \[(?P<category>[^\]\n]+)\]$"
)

RUST_REGEX = r"^warning: (?P<description>.+)\n\s+-->\s(?P<file>[^:\n]+):(?P<line>\d+):(?P<column>\d+)$"


@pytest.fixture
def settings_toml():
    """A Wcnt.toml with one categorizable kind (gcc) and one plain kind (rust)."""
    return f"""
[gcc]
regex = '{GCC_REGEX}'
files = ["**/gcc.txt"]

[rust]
regex = '{RUST_REGEX}'
files = ["**/rust.txt"]
default = 2
"""


@pytest.fixture
def config(settings_toml):
    from wcnt.core.settings_loader import load_config_from_str

    return load_config_from_str(settings_toml)


@pytest.fixture
def gcc_kind(config):
    return config.kind_named("gcc")


@pytest.fixture
def rust_kind(config):
    return config.kind_named("rust")


def gcc_line(path, line, column, description, category):
    return f"{path}:{line}:{column}: warning: {description} [{category}]"


@pytest.fixture
def make_project(tmp_path, settings_toml):
    """
    Build a project tree under tmp_path.

    Usage: make_project(limits={"src": "gcc = 1"}, logs={"build/gcc.txt": "..."})
    """

    def _make(limits=None, logs=None, settings=None) -> Path:
        root = (tmp_path / "project").resolve()
        root.mkdir(exist_ok=True)
        (root / "Wcnt.toml").write_text(settings or settings_toml)
        for directory, content in (limits or {}).items():
            target = root / directory
            target.mkdir(parents=True, exist_ok=True)
            (target / "Limits.toml").write_text(content)
        for relative, content in (logs or {}).items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return root

    return _make
