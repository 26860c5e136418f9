from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket

import config
from draft.board import board_loader, load_draft_board
from draft.commit import commit_pick
from draft.engine import auto_pick_and_commit
from draft.errors import DraftError
from draft.live import DEFAULT_FEED, SubscriptionClosed
from draft.types import Principal
from app.schemas.draft import DraftPickRequest
from app.services.draft_facade import open_repo, raise_http, error_payload
from app.services.identity import principal_from_websocket, require_principal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/games/{game_id}/draft")
async def api_draft_board(game_id: str, principal: Principal = Depends(require_principal)):
    """Pool + turn + round for the caller (always re-read from the store)."""
    try:
        with open_repo() as repo:
            board = load_draft_board(repo, game_id, principal.profile_id)
    except DraftError as e:
        raise_http(e)
    return {"ok": True, "board": board.to_public_dict()}


@router.post("/api/games/{game_id}/draft/picks")
async def api_draft_pick(game_id: str, req: DraftPickRequest, principal: Principal = Depends(require_principal)):
    """Commit one pick for the caller (or, for a commissioner, on behalf of forced_parent_id)."""
    try:
        with open_repo() as repo:
            pick = commit_pick(
                repo,
                game_id=game_id,
                player_id=req.player_id,
                actor=principal,
                forced_parent_id=req.forced_parent_id,
            )
    except DraftError as e:
        raise_http(e)
    return {"ok": True, "game_id": game_id, "pick": pick.to_dict()}


@router.post("/api/games/{game_id}/draft/auto-pick")
async def api_draft_auto_pick(game_id: str, principal: Principal = Depends(require_principal)):
    """Commit the best legal player (highest historical average) for the current picker."""
    try:
        with open_repo() as repo:
            pick = auto_pick_and_commit(repo, game_id=game_id, actor=principal)
    except DraftError as e:
        raise_http(e)
    return {"ok": True, "game_id": game_id, "pick": pick.to_dict()}


async def _send_board(websocket: WebSocket, game_id: str, viewer_id: str) -> None:
    try:
        board = await asyncio.to_thread(board_loader(config.get_db_path(), game_id, viewer_id))
    except DraftError as e:
        # Never push a turn/pool we could not verify.
        await websocket.send_json({"type": "error", "error": error_payload(e)})
        return
    await websocket.send_json({"type": "draft_board", "board": board.to_public_dict()})


@router.websocket("/api/games/{game_id}/draft/ws")
async def ws_draft(websocket: WebSocket, game_id: str):
    """Live board: full board on connect, then a full board after every committed pick.

    Any client text message requests an explicit resync.
    """
    principal: Optional[Principal] = await asyncio.to_thread(principal_from_websocket, websocket)
    if principal is None:
        await websocket.close(code=4401)
        return
    await websocket.accept()

    # Subscribe before the first send so no insert in between is missed.
    sub = DEFAULT_FEED.subscribe(game_id)
    event_task: Optional[asyncio.Future] = None
    recv_task: Optional[asyncio.Future] = None
    try:
        await _send_board(websocket, game_id, principal.profile_id)
        while True:
            if event_task is None:
                event_task = asyncio.ensure_future(sub.get())
            if recv_task is None:
                recv_task = asyncio.ensure_future(websocket.receive())
            done, _ = await asyncio.wait({event_task, recv_task}, return_when=asyncio.FIRST_COMPLETED)

            if recv_task in done:
                message = recv_task.result()
                recv_task = None
                if message.get("type") == "websocket.disconnect":
                    break
            if event_task in done:
                try:
                    event_task.result()
                except SubscriptionClosed:
                    break
                event_task = None
                sub.drain_pending()
            await _send_board(websocket, game_id, principal.profile_id)
    finally:
        for t in (event_task, recv_task):
            if t is not None and not t.done():
                t.cancel()
        sub.unsubscribe()
        logger.debug("draft ws closed game_id=%s profile_id=%s", game_id, principal.profile_id)
