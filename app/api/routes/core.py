from __future__ import annotations

import sqlite3

from fastapi import APIRouter, HTTPException

import config
from league_repo import LeagueRepo
from schema import SCHEMA_VERSION

router = APIRouter()


@router.get("/api/health")
async def api_health():
    """Liveness + store reachability."""
    try:
        with LeagueRepo(config.get_db_path()) as repo:
            repo.validate_integrity()
    except (sqlite3.Error, ValueError) as e:
        raise HTTPException(status_code=503, detail={"code": "STORE_UNAVAILABLE", "message": str(e)})
    return {"ok": True, "schema_version": SCHEMA_VERSION}
