from __future__ import annotations

import sqlite3
from typing import Any, Dict, NoReturn

from fastapi import HTTPException

import config
from league_repo import LeagueRepo
from draft.errors import (
    DraftAuthorizationError,
    DraftConflictError,
    DraftEligibilityError,
    DraftError,
    DraftNotFoundError,
    DraftUnavailableError,
    STORE_UNAVAILABLE,
)
from draft.live import DEFAULT_FEED


_STATUS_BY_ERROR = (
    (DraftAuthorizationError, 403),
    (DraftEligibilityError, 409),
    (DraftConflictError, 409),
    (DraftNotFoundError, 404),
    (DraftUnavailableError, 503),
)


def open_repo() -> LeagueRepo:
    """Per-request connection wired to the process change feed (inserts notify live observers)."""
    try:
        return LeagueRepo(config.get_db_path(), change_feed=DEFAULT_FEED)
    except sqlite3.Error as exc:
        raise DraftUnavailableError(STORE_UNAVAILABLE, "cannot open draft store, retry", {"error": str(exc)}) from exc


def error_payload(exc: DraftError) -> Dict[str, Any]:
    return {"code": exc.code, "message": exc.message, "details": exc.details}


def http_status_for(exc: DraftError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def raise_http(exc: DraftError) -> NoReturn:
    raise HTTPException(status_code=http_status_for(exc), detail=error_payload(exc)) from exc
