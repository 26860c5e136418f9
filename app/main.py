from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from league_repo import LeagueRepo
from draft.live import DEFAULT_FEED
from app.api.router import api_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Youth Fantasy Draft server")

@app.on_event("startup")
def _startup_init_db() -> None:
    # DB init once per process; every request opens its own connection afterwards.
    db_path = config.get_db_path()
    with LeagueRepo(db_path) as repo:
        repo.init_db()
        warnings = repo.validate_integrity()
    if warnings:
        logger.warning("startup integrity warnings: %s", warnings)
    logger.info("draft server ready (db_path=%s)", db_path)


@app.on_event("shutdown")
def _shutdown_close_feed() -> None:
    DEFAULT_FEED.close_all()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
