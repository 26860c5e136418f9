from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class DraftPickRequest(BaseModel):
    player_id: str
    # Commissioner only: attribute the pick to this parent (turn and restrictions bypassed).
    forced_parent_id: Optional[str] = None
