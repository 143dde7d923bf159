"""
Settings Loader — Reads Wcnt.toml into a WcntConfig.

All validation happens here, before any file is searched: a kind without a
regex or files, an invalid regex, or a regex without the `file` group aborts
the run with a ConfigurationError naming the kind.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from wcnt.core.arena import SearchableArena
from wcnt.errors import ConfigurationError
from wcnt.models.config_models import REQUIRED_GROUP, KindConfig, WcntConfig
from wcnt.models.warning_models import Kind

logger = logging.getLogger("wcnt.settings")


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"])
        if err["type"] == "missing":
            parts.append(f"missing field `{location}`")
        else:
            parts.append(f"`{location}`: {err['msg']}")
    return "; ".join(parts)


def load_config_from_str(text: str) -> WcntConfig:
    """Parse the contents of a Wcnt.toml file."""
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Settings file is not valid TOML: {e}") from e

    arena = SearchableArena()
    kinds: dict[Kind, KindConfig] = {}
    for name, value in raw.items():
        if not isinstance(value, dict):
            raise ConfigurationError(f"Kind '{name}' must be a table with `regex` and `files`.")
        try:
            kind_config = KindConfig.model_validate(value)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings for kind '{name}': {_describe(e)}") from e

        if REQUIRED_GROUP not in kind_config.regex.groupindex:
            raise ConfigurationError(
                f"Regex for kind '{name}' does not capture the required field `{REQUIRED_GROUP}`."
            )

        kind = Kind(arena.insert(name))
        kinds[kind] = kind_config
        logger.debug(
            f"Configured kind '{name}' (categorizable={kind_config.categorizable}, "
            f"{len(kind_config.files)} globs)"
        )

    return WcntConfig(string_arena=arena, kinds=kinds)


def load_config(path: Path) -> WcntConfig:
    """Read and parse a Wcnt.toml file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Could not read settings file `{path}`: {e}") from e
    return load_config_from_str(text)
