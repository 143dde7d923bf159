"""
Scan Worker — Async orchestrator running the full counting pipeline.

Pipeline:
1. Load Wcnt.toml (kinds, regexes, globs, defaults)
2. Discover Limits.toml and log files under the start directory
3. Parse every Limits.toml
4. Scan every (log file, kind) pair in parallel, one private arena per scan
5. Merge scan results into the global arena as they complete
6. Re-key warnings to the declared limit entries
7. Compare counts against thresholds
8. Optionally ratchet limits down when nothing is violated
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from wcnt.config import settings
from wcnt.core.aggregator import (
    Results,
    gather_results_from_logs,
    merge_results,
    remap_to_actual_limit_entries,
)
from wcnt.core.checker import check_warnings_against_thresholds
from wcnt.core.discovery import LimitsFileFound, LogFile, build_globsets, discover_files
from wcnt.core.limits import flatten_limits, parse_limits_file, update_limits, write_limits_file
from wcnt.core.reporting import display_config, display_limits_file
from wcnt.core.resolver import LimitsResolver
from wcnt.core.scanner import LogSearchResults, read_log_file, scan_log_text
from wcnt.core.settings_loader import load_config
from wcnt.errors import LogReadError
from wcnt.models.config_models import WcntConfig
from wcnt.models.limit_models import LimitsFile
from wcnt.models.warning_models import FinalTally

logger = logging.getLogger("wcnt.worker")


@dataclass
class CheckOutcome:
    """Everything a run produced, for reporting by the CLI or the API."""

    scan_id: str
    config: WcntConfig
    limits: dict[PurePath, LimitsFile]
    log_files: list[LogFile]
    results: Results
    tally: FinalTally
    read_errors: list[LogReadError] = field(default_factory=list)
    updated_files: list[Path] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.tally.violations()


class ScanWorker:
    """Async check orchestrator implementing the full pipeline."""

    def __init__(self, max_concurrency: int | None = None) -> None:
        self.max_concurrency = (
            max_concurrency if max_concurrency is not None else settings.max_concurrency
        )

    async def run_check(
        self,
        start_dir: Path,
        config_file: Path | None = None,
        only_kinds: list[str] | None = None,
        update: bool = False,
    ) -> CheckOutcome:
        """
        Execute the full pipeline.

        Args:
            start_dir: Directory searched for log and limits files
            config_file: Wcnt.toml to use (default: <start_dir>/Wcnt.toml)
            only_kinds: Restrict the run to these kinds
            update: Rewrite Limits.toml files with lower thresholds if nothing is violated

        Returns:
            CheckOutcome with the tally and the merged results.

        Raises:
            ConfigurationError: invalid settings or limits file, nothing is scanned
            MalformedCaptureError: a `line`/`column` capture was not a positive number
        """
        scan_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()
        start_dir = Path(start_dir)
        config_file = Path(config_file) if config_file else start_dir / settings.config_file_name

        # ── Step 1: Settings ──
        config = load_config(config_file)
        config.configure_kinds_to_run(only_kinds)
        logger.debug(f"[{scan_id}] Starting with these settings: {display_config(config)}")

        # ── Step 2: Discovery ──
        globsets = build_globsets(config)
        found = await asyncio.to_thread(discover_files, start_dir, globsets)
        log_files = [f for f in found if isinstance(f, LogFile)]
        limit_paths = [f.path for f in found if isinstance(f, LimitsFileFound)]
        logger.info(
            f"[{scan_id}] Found {len(log_files)} log files and "
            f"{len(limit_paths)} limits files under `{start_dir}`"
        )

        # ── Step 3: Limits files ──
        limits: dict[PurePath, LimitsFile] = {}
        for path in limit_paths:
            limits[path] = parse_limits_file(config, path)
            logger.debug(f"[{scan_id}] Found limits file at `{path}`")
            logger.debug(display_limits_file(limits[path], config.string_arena))

        # ── Step 4–5: Parallel scans, merged as they complete ──
        read_errors: list[LogReadError] = []
        raw_results = await self._scan_all(scan_id, config, log_files, limit_paths, read_errors)

        # ── Step 6–7: Re-key and check ──
        flat_limits = flatten_limits(limits)
        results = remap_to_actual_limit_entries(flat_limits, raw_results)
        tally = check_warnings_against_thresholds(flat_limits, results, config.defaults())

        outcome = CheckOutcome(
            scan_id=scan_id,
            config=config,
            limits=limits,
            log_files=log_files,
            results=results,
            tally=tally,
            read_errors=read_errors,
        )

        # ── Step 8: Ratchet ──
        if update and read_errors:
            logger.warning(
                f"[{scan_id}] Not updating limits: {len(read_errors)} log files could not be read"
            )
        elif update and outcome.passed:
            outcome.updated_files = await asyncio.to_thread(self._write_updates, outcome)

        outcome.duration_ms = round((time.monotonic() - start_time) * 1000, 2)
        logger.info(
            f"[{scan_id}] Check complete in {outcome.duration_ms:.0f}ms — "
            f"{len(tally.violations())} violations, {len(tally.non_violations())} within limits, "
            f"{len(read_errors)} unreadable logs"
        )
        return outcome

    async def _scan_all(
        self,
        scan_id: str,
        config: WcntConfig,
        log_files: list[LogFile],
        limit_paths: list[PurePath],
        read_errors: list[LogReadError],
    ) -> Results:
        """Fan out one task per log file and merge results on this thread as they arrive."""
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        regexes = config.regexes()
        limit_files = tuple(limit_paths)

        async def scan_one(log_file: LogFile) -> list[LogSearchResults] | LogReadError:
            guard = semaphore if semaphore is not None else contextlib.nullcontext()
            async with guard:
                return await self._scan_log_file(log_file, regexes, limit_files)

        results: Results = {}
        tasks = [asyncio.ensure_future(scan_one(lf)) for lf in log_files]
        try:
            for next_done in asyncio.as_completed(tasks):
                outcome = await next_done
                batch = [outcome] if isinstance(outcome, LogReadError) else outcome
                merge_results(
                    results, gather_results_from_logs(config.string_arena, batch, read_errors)
                )
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        logger.info(f"[{scan_id}] Merged {sum(len(w) for w in results.values())} distinct warnings")
        return results

    async def _scan_log_file(
        self,
        log_file: LogFile,
        regexes: dict,
        limit_files: tuple[PurePath, ...],
    ) -> list[LogSearchResults] | LogReadError:
        """Read a log file once, then scan it once per kind, sharing the text."""
        try:
            text = await asyncio.to_thread(read_log_file, log_file.path)
        except OSError as e:
            return LogReadError(log_file.path, str(e))

        # Some build systems do the equivalent of `make all > big_log.txt`,
        # so one file may be searched for several kinds.
        scans = [
            asyncio.to_thread(
                scan_log_text,
                text,
                kind,
                regexes[kind],
                LimitsResolver(limit_files),
                log_file.path,
            )
            for kind in log_file.kinds
            if kind in regexes
        ]
        return list(await asyncio.gather(*scans))

    @staticmethod
    def _write_updates(outcome: CheckOutcome) -> list[Path]:
        config = outcome.config
        written: list[Path] = []
        updated = update_limits(outcome.limits, outcome.tally, config.kinds())
        for path, limits_file in updated.items():
            logger.info(f"[{outcome.scan_id}] Updating `{path}`")
            written.append(
                write_limits_file(limits_file, config.string_arena, path, config.defaults())
            )
        return written
