"""
Liveness probe — GET /health reports the version and the file names in use.
"""

from __future__ import annotations

from fastapi import APIRouter

from wcnt.config import settings

router = APIRouter()

VERSION = "0.4.0"


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "version": VERSION,
        "config_file_name": settings.config_file_name,
        "limits_file_name": settings.limits_file_name,
    }
