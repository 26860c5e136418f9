from __future__ import annotations

"""Identity collaborator: caller -> Principal(profile_id, is_commissioner).

Authentication itself happens upstream; this layer trusts the profile id header
(config.PROFILE_ID_HEADER) and looks the profile up to learn the commissioner flag.
"""

from typing import Optional

from fastapi import HTTPException, Request, WebSocket

import config
from league_repo import LeagueRepo
from draft.types import Principal, norm_id


def lookup_principal(profile_id: Optional[str]) -> Optional[Principal]:
    pid = norm_id(profile_id)
    if not pid:
        return None
    with LeagueRepo(config.get_db_path()) as repo:
        profile = repo.get_profile(pid)
    if profile is None:
        return None
    return Principal(profile_id=profile["profile_id"], is_commissioner=bool(profile["is_commissioner"]))


def require_principal(request: Request) -> Principal:
    principal = lookup_principal(request.headers.get(config.PROFILE_ID_HEADER))
    if principal is None:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHENTICATED", "message": "sign in required"})
    return principal


def principal_from_websocket(websocket: WebSocket) -> Optional[Principal]:
    # Browsers cannot set headers on a WebSocket handshake; accept ?profile_id= as well.
    raw = websocket.headers.get(config.PROFILE_ID_HEADER) or websocket.query_params.get("profile_id")
    return lookup_principal(raw)
