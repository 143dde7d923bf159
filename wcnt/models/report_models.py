"""
Check Request/Response Models — API contract schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from wcnt.core.reporting import display_entry, display_entry_count, display_warning
from wcnt.models.warning_models import CountsTowardsLimit


class CheckRequest(BaseModel):
    """Request body for POST /check."""

    start_dir: str = Field(..., description="Directory to search for log and limits files")
    config_file: str | None = Field(
        default=None, description="Wcnt.toml to use (default: <start_dir>/Wcnt.toml)"
    )
    only: list[str] = Field(default_factory=list, description="Only count these kinds")
    update_limits: bool = Field(
        default=False, description="Ratchet Limits.toml files down if nothing is violated"
    )


class EntryCountReport(BaseModel):
    """One limit entry with its threshold and observed count."""

    entry: str = Field(..., description="<limits file>:[<kind>/<category>]")
    limits_file: str | None = None
    kind: str
    category: str
    limit: int | None = Field(default=None, description="None means infinite")
    actual: int
    violation: bool
    summary: str = Field(default="", description="Display line as printed by the CLI")
    warnings: list[str] = Field(default_factory=list)


class CheckResponse(BaseModel):
    """Top-level response for POST /check."""

    message: str = "check_complete"
    scan_id: str = ""
    passed: bool = True
    violations: list[EntryCountReport] = Field(default_factory=list)
    non_violations: list[EntryCountReport] = Field(default_factory=list)
    read_errors: list[str] = Field(default_factory=list)
    updated_files: list[str] = Field(default_factory=list)
    duration_ms: float = 0.0


def build_check_response(outcome) -> CheckResponse:
    """Assemble a CheckResponse from a worker CheckOutcome."""
    arena = outcome.config.string_arena

    def to_report(entry_count, with_warnings: bool) -> EntryCountReport:
        entry = entry_count.entry
        warnings: list[str] = []
        if with_warnings:
            found = sorted(outcome.results.get(entry, ()), key=CountsTowardsLimit.sort_key)
            warnings = [display_warning(w, arena) for w in found]
        return EntryCountReport(
            entry=display_entry(entry, arena),
            limits_file=str(entry.limits_file) if entry.limits_file is not None else None,
            kind=entry.kind.to_str(arena),
            category=entry.category.to_str(arena),
            limit=entry_count.limit,
            actual=entry_count.actual,
            violation=entry_count.is_violation,
            summary=display_entry_count(entry_count, arena),
            warnings=warnings,
        )

    return CheckResponse(
        scan_id=outcome.scan_id,
        passed=outcome.passed,
        violations=[to_report(ec, True) for ec in outcome.tally.violations()],
        non_violations=[to_report(ec, False) for ec in outcome.tally.non_violations()],
        read_errors=[str(e) for e in outcome.read_errors],
        updated_files=[str(p) for p in outcome.updated_files],
        duration_ms=outcome.duration_ms,
    )
