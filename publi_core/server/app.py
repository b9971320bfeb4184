# =============================================================================
# publi_core/server/app.py
# Remote Persistence Service (GET/POST /api/data)
# =============================================================================
"""
FastAPI application holding the shared copy of the document.

    GET  /api/data   -> stored document, or null when nothing was pushed yet
    POST /api/data   -> replace the stored document, {"success": true}
    GET  /health     -> liveness plus last update time
"""

from __future__ import annotations
import json
import sqlite3
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from publi_core.server.storage import DocumentRowStorage

logger = logging.getLogger(__name__)

DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    db_path: Path,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
    storage: Optional[DocumentRowStorage] = None,
) -> FastAPI:
    """
    Build the persistence service.

    Args:
        db_path: SQLite file holding the document row
        max_body_bytes: Largest accepted POST body
        storage: Pre-built storage (tests inject failing doubles)
    """
    storage = storage or DocumentRowStorage(db_path)

    app = FastAPI(title="PubliManager persistence")
    app.state.storage = storage
    app.state.max_body_bytes = max_body_bytes

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > max_body_bytes:
            logger.warning(f"Rejected {declared}-byte body (limit {max_body_bytes})")
            return _error(413, "Request body too large")
        return await call_next(request)

    # Outermost, so 413 responses still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        try:
            updated_at = await run_in_threadpool(storage.last_updated)
        except sqlite3.Error as e:
            logger.error(f"Health check could not read storage: {e}")
            return _error(500, "Database unavailable")
        return {"status": "ok", "updated_at": updated_at}

    @app.get("/api/data")
    async def get_data():
        try:
            document = await run_in_threadpool(storage.read_document)
        except sqlite3.Error as e:
            logger.error(f"DB GET error: {e}")
            return _error(500, "Database read error")
        except ValueError as e:
            logger.error(f"Stored document is corrupt: {e}")
            return _error(500, "Corrupt data in database")

        if document is None:
            logger.info("No document stored yet, returning null")
        return JSONResponse(content=document)

    @app.post("/api/data")
    async def save_data(request: Request):
        body = await request.body()
        if len(body) > max_body_bytes:
            return _error(413, "Request body too large")

        try:
            document = json.loads(body)
        except ValueError:
            return _error(400, "Invalid request body")
        if not isinstance(document, dict):
            return _error(400, "Invalid request body")

        try:
            await run_in_threadpool(storage.write, document)
        except sqlite3.Error as e:
            logger.error(f"DB SAVE error: {e}")
            return _error(500, "Database write error")

        return {"success": True}

    return app
