"""
wcnt Errors — Exception taxonomy shared by the CLI, the worker and the API.

Configuration problems abort a run before any log file is scanned.
Malformed line/column captures abort the run while scanning.
Unreadable log files are not exceptions; see LogReadError.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class WcntError(Exception):
    """Base class for every error raised by wcnt."""


class ConfigurationError(WcntError, ValueError):
    """The settings file (Wcnt.toml) is invalid."""


class LimitsFileError(ConfigurationError):
    """A Limits.toml file could not be read or is invalid."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        if path is None:
            super().__init__(reason)
        else:
            super().__init__(f"Could not parse `{path}`. Reason `{reason}`")


class MalformedCaptureError(WcntError):
    """A `line` or `column` capture was not a positive number."""

    def __init__(self, group: str, value: str, log_file: Path | None = None) -> None:
        self.group = group
        self.value = value
        self.log_file = log_file
        where = f" in `{log_file}`" if log_file else ""
        super().__init__(
            f"Capture for `{group}` was not a non zero number: `{value}`{where}"
        )


class ForeignHandleError(WcntError, LookupError):
    """A handle was presented to an arena that did not issue it."""


@dataclass(frozen=True)
class LogReadError:
    """A log file that could not be read. Reported, then skipped."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Could not open log file `{self.path}`. Reason: `{self.reason}`"
