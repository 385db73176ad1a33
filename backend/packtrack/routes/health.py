"""
PackTrack Backend — Health Check Route
=======================================

What:  GET /health for container probes and load balancers.
How:   Runs SELECT 1 on the request session and checks that the document
       directory exists and is writable.

Status levels:
    healthy:    database reachable and upload directory writable
    unhealthy:  either check failed (still HTTP 200; see the fields)
"""

import logging
import os
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from packtrack import __version__
from packtrack.database import get_db_session
from packtrack.dependencies import get_file_store
from packtrack.schemas.common import HealthResponse
from packtrack.services.file_store import FileStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    db: AsyncSession = Depends(get_db_session),
    store: FileStore = Depends(get_file_store),
) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    document_dir = store.document_dir
    if not (document_dir.is_dir() and os.access(document_dir, os.W_OK)):
        storage_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: upload directory not writable: %s", document_dir)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
