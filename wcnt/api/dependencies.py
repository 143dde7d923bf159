"""
Route dependencies for wcnt.api, resolved through Depends().
"""

from __future__ import annotations

from functools import lru_cache

from wcnt.workers.scan_worker import ScanWorker


@lru_cache
def get_scan_worker() -> ScanWorker:
    """One worker per process; its concurrency cap comes from settings."""
    return ScanWorker()
