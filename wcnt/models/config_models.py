"""
Settings Data Models — The kinds of warnings declared in Wcnt.toml.

Every Kind needs a regular expression matching the warning and a list of
glob patterns naming the log files to search through.
"""

from __future__ import annotations

import math
import re
from typing import Iterator

from pydantic import BaseModel, Field, field_validator

from wcnt.core.arena import SearchableArena
from wcnt.models.warning_models import Kind

REQUIRED_GROUP = "file"
OPTIONAL_GROUPS = ("line", "column", "category", "description")


class KindConfig(BaseModel):
    """Settings needed to find and search log files for one Kind."""

    regex: re.Pattern = Field(..., description="Compiled in multi-line mode")
    files: list[str] = Field(..., description="Glob patterns of log files to search")
    default: int | float | None = Field(
        default=None,
        description="Threshold when no Limits.toml applies: integer >= 0 or inf. Unset means 0.",
    )

    @field_validator("regex", mode="before")
    @classmethod
    def _compile_regex(cls, value):
        if isinstance(value, re.Pattern):
            return value
        if not isinstance(value, str):
            raise ValueError("regex must be a string")
        try:
            return re.compile(value, re.MULTILINE)
        except re.error as e:
            raise ValueError(f"invalid regex: {e}") from e

    @field_validator("default", mode="before")
    @classmethod
    def _check_default(cls, value):
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("default can only be a positive integer or `inf`.")
        if isinstance(value, int) and value >= 0:
            return value
        if isinstance(value, float) and math.isinf(value) and value > 0:
            return value
        raise ValueError("default can only be a positive integer or `inf`.")

    @property
    def categorizable(self) -> bool:
        return "category" in self.regex.groupindex

    @property
    def default_threshold(self) -> int | None:
        if self.default is None:
            return 0
        if isinstance(self.default, float):
            return None
        return self.default


class WcntConfig:
    """
    The parsed Wcnt.toml.

    Kind names are interned in `string_arena`, which is the global arena of a
    run: limits files and merged scan results intern into it too.
    """

    def __init__(
        self,
        string_arena: SearchableArena | None = None,
        kinds: dict[Kind, KindConfig] | None = None,
    ) -> None:
        self.string_arena = string_arena or SearchableArena()
        self._kinds: dict[Kind, KindConfig] = kinds or {}
        self._kinds_to_ignore: set[Kind] = set()

    def __len__(self) -> int:
        return len(self._kinds)

    def iter(self) -> Iterator[tuple[Kind, KindConfig]]:
        """All declared kinds, in declaration order, including ignored ones."""
        return iter(self._kinds.items())

    def get(self, kind: Kind) -> KindConfig | None:
        return self._kinds.get(kind)

    def kind_named(self, name: str) -> Kind | None:
        handle = self.string_arena.get_id(name)
        if handle is None:
            return None
        kind = Kind(handle)
        return kind if kind in self._kinds else None

    def kinds(self) -> list[Kind]:
        """Kinds to run, in declaration order."""
        return [k for k in self._kinds if k not in self._kinds_to_ignore]

    def configure_kinds_to_run(self, only_these: list[str] | None) -> None:
        """Restrict the run to the named kinds. Unknown names are ignored."""
        if not only_these:
            self._kinds_to_ignore = set()
            return
        wanted = {k for k in (self.kind_named(name) for name in only_these) if k is not None}
        self._kinds_to_ignore = {k for k in self._kinds if k not in wanted}

    def categorizables(self) -> set[Kind]:
        return {kind for kind, kc in self._kinds.items() if kc.categorizable}

    def defaults(self) -> dict[Kind, int | None]:
        return {kind: kc.default_threshold for kind, kc in self._kinds.items()}

    def regexes(self) -> dict[Kind, re.Pattern]:
        return {kind: self._kinds[kind].regex for kind in self.kinds()}
