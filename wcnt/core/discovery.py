"""
File Discovery — Walks the start directory looking for files of interest.

Files of interest are either Limits.toml files, or log files matching the
glob patterns registered for one or more Kinds.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from wcnt.config import settings
from wcnt.errors import ConfigurationError
from wcnt.models.config_models import WcntConfig
from wcnt.models.warning_models import Kind

logger = logging.getLogger("wcnt.discovery")


class GlobSet:
    """
    A set of glob patterns matched against whole paths.

    `*` also matches path separators, and a leading `**/` may match nothing,
    so `**/gcc.txt` matches both `gcc.txt` and `/ci/logs/gcc.txt`.
    """

    def __init__(self, patterns: list[str]) -> None:
        self.patterns = list(patterns)
        alternatives: list[str] = []
        for pattern in self.patterns:
            alternatives.append(fnmatch.translate(pattern))
            if pattern.startswith("**/"):
                alternatives.append(fnmatch.translate(pattern[3:]))
        self._regex = re.compile("|".join(alternatives)) if alternatives else None

    def __len__(self) -> int:
        return len(self.patterns)

    def is_match(self, path: str | os.PathLike) -> bool:
        if self._regex is None:
            return False
        return self._regex.match(Path(path).as_posix()) is not None


@dataclass(frozen=True)
class LimitsFileFound:
    """Discovery found a Limits.toml file."""

    path: Path


@dataclass(frozen=True)
class LogFile:
    """
    A file to be searched for warnings. A log file is searched once per Kind
    whose globs matched it, each Kind with its own regex.
    """

    path: Path
    kinds: tuple[Kind, ...]


FileData = Union[LimitsFileFound, LogFile]


def file_data_sort_key(data: FileData) -> tuple[int, str]:
    return (0 if isinstance(data, LimitsFileFound) else 1, str(data.path))


def build_globsets(config: WcntConfig) -> dict[Kind, GlobSet]:
    """Map every kind to run to the GlobSet of its `files` patterns."""
    result: dict[Kind, GlobSet] = {}
    for kind in config.kinds():
        kind_config = config.get(kind)
        if not kind_config.files:
            raise ConfigurationError(
                f"Kind '{kind.to_str(config.string_arena)}' does not list any `files` patterns."
            )
        try:
            result[kind] = GlobSet(kind_config.files)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid glob for kind '{kind.to_str(config.string_arena)}': {e}"
            ) from e
    return result


def classify_path(
    path: Path,
    globsets: dict[Kind, GlobSet],
    limits_name: str | None = None,
) -> FileData | None:
    """Decide whether `path` is a limits file, a log file of some kinds, or neither."""
    limits_name = limits_name or settings.limits_file_name
    if path.name == limits_name:
        return LimitsFileFound(path.resolve())

    abs_path = path.resolve()
    kinds = tuple(kind for kind, globs in globsets.items() if globs.is_match(abs_path))
    if kinds:
        return LogFile(abs_path, kinds)
    return None


def discover_files(
    start_dir: Path,
    globsets: dict[Kind, GlobSet],
    limits_name: str | None = None,
    skip_hidden: bool | None = None,
) -> list[FileData]:
    """Walk `start_dir` and return every file of interest, sorted."""
    skip_hidden = settings.skip_hidden if skip_hidden is None else skip_hidden
    found: list[FileData] = []

    for root, dirs, files in os.walk(start_dir):
        if skip_hidden:
            dirs[:] = [d for d in dirs if not d.startswith(".")]
        dirs.sort()
        for name in files:
            if skip_hidden and name.startswith("."):
                continue
            data = classify_path(Path(root) / name, globsets, limits_name)
            if data is not None:
                found.append(data)

    found.sort(key=file_data_sort_key)
    logger.debug(f"Discovered {len(found)} files of interest under `{start_dir}`")
    return found
