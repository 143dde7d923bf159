"""
wcnt FastAPI Application.

  POST /check  → count warnings under a directory, compare against Limits.toml files
  GET  /health → {"status": "ok"}
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from wcnt.api.routes.check import router as check_router
from wcnt.api.routes.health import VERSION, router as health_router
from wcnt.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("wcnt")

app = FastAPI(
    title="wcnt",
    description="Warning counter — compare warnings in log files against declared limits",
    version=VERSION,
)

app.include_router(health_router)
app.include_router(check_router)
