# config.py
from __future__ import annotations

import os
from typing import Optional

# ====== Store ======
# The API refuses to start without a db path (no implicit default file).
DB_PATH_ENV: str = "DRAFT_DB_PATH"

# Seconds a writer waits on a locked SQLite database before giving up.
DB_BUSY_TIMEOUT_S: float = float(os.environ.get("DRAFT_DB_BUSY_TIMEOUT_S", "5.0"))

# ====== Draft rules ======
# Commissioner force-picks skip the attributed parent's restrictions unless this is on.
OVERRIDE_ENFORCES_RESTRICTIONS: bool = (
    os.environ.get("DRAFT_OVERRIDE_ENFORCES_RESTRICTIONS", "").strip().lower() in {"1", "true", "yes", "on"}
)

# ====== Identity ======
# Header carrying the authenticated profile id (set by the fronting auth proxy).
PROFILE_ID_HEADER: str = "X-Profile-Id"

# ====== Live feed ======
# Per-subscriber buffer; older signals are dropped once full (every signal means "refetch").
FEED_QUEUE_MAXSIZE: int = 64


def get_db_path() -> str:
    db_path: Optional[str] = os.environ.get(DB_PATH_ENV)
    if not db_path:
        raise RuntimeError(f"{DB_PATH_ENV} is required (no default db_path).")
    return db_path
