"""
wcnt — POST /check endpoint.

Runs the same pipeline as the command line on a directory visible to the
server and returns the tally as JSON.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from wcnt.api.dependencies import get_scan_worker
from wcnt.errors import ConfigurationError, MalformedCaptureError
from wcnt.models.report_models import CheckRequest, CheckResponse, build_check_response
from wcnt.workers.scan_worker import ScanWorker

logger = logging.getLogger("wcnt.api.check")
router = APIRouter()


@router.post("/check", response_model=CheckResponse)
async def check_limits(req: CheckRequest, worker: ScanWorker = Depends(get_scan_worker)):
    """Count warnings under `start_dir` and compare them with the declared limits."""
    start_dir = Path(req.start_dir)
    if not start_dir.is_dir():
        raise HTTPException(status_code=404, detail=f"Directory `{start_dir}` does not exist")

    try:
        outcome = await worker.run_check(
            start_dir,
            Path(req.config_file) if req.config_file else None,
            only_kinds=req.only or None,
            update=req.update_limits,
        )
    except (ConfigurationError, MalformedCaptureError) as e:
        logger.warning(f"Check of `{start_dir}` failed: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e

    return build_check_response(outcome)
