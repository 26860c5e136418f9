from __future__ import annotations

"""Live sync: keep one observer's board in step with the store.

DraftObserver subscribes to the change feed *before* its first full refresh, so
no insert committed in between is missed, and then refetches the whole board on
every signal. It never merges event payloads.

If a refresh fails the observer keeps the error and marks its board stale;
`current()` then returns None instead of a turn/pool it cannot verify.
"""

import asyncio
import logging
import sqlite3
from typing import Callable, Optional

from .board import DraftBoard
from .errors import DraftError, DraftUnavailableError, STORE_UNAVAILABLE
from .live import DEFAULT_FEED, DraftChangeFeed, Subscription

logger = logging.getLogger(__name__)

UpdateFn = Callable[[Optional[DraftBoard], Optional[DraftError]], None]


class DraftObserver:
    def __init__(
        self,
        *,
        game_id: str,
        loader: Callable[[], DraftBoard],
        feed: DraftChangeFeed = DEFAULT_FEED,
        on_update: Optional[UpdateFn] = None,
    ) -> None:
        self.game_id = game_id
        self._loader = loader
        self._feed = feed
        self._on_update = on_update
        self._sub: Optional[Subscription] = None
        self.board: Optional[DraftBoard] = None
        self.last_error: Optional[DraftError] = None
        self.is_stale = True
        self.refresh_count = 0

    def current(self) -> Optional[DraftBoard]:
        return None if self.is_stale else self.board

    def _load_blocking(self) -> DraftBoard:
        try:
            return self._loader()
        except sqlite3.Error as exc:
            raise DraftUnavailableError(
                STORE_UNAVAILABLE, "cannot read draft data, retry", {"game_id": self.game_id, "error": str(exc)}
            ) from exc

    async def refresh(self) -> Optional[DraftBoard]:
        """Full refetch (pool + projection). Store reads run off the event loop."""
        try:
            board = await asyncio.to_thread(self._load_blocking)
        except DraftError as exc:
            logger.warning("draft refresh failed game_id=%s: %s", self.game_id, exc)
            self.last_error = exc
            self.is_stale = True
            self._notify(None, exc)
            return None
        self.board = board
        self.last_error = None
        self.is_stale = False
        self.refresh_count += 1
        self._notify(board, None)
        return board

    def _notify(self, board: Optional[DraftBoard], error: Optional[DraftError]) -> None:
        if self._on_update is not None:
            self._on_update(board, error)

    async def start(self) -> Optional[DraftBoard]:
        """Subscribe, then refresh immediately (mandatory on every (re)connect)."""
        if self._sub is None or self._sub.closed:
            self._sub = self._feed.subscribe(self.game_id)
        return await self.refresh()

    async def run(self) -> None:
        """start() then refresh on every change signal until stop()."""
        await self.start()
        sub = self._sub
        async for _event in sub:
            sub.drain_pending()
            await self.refresh()

    def stop(self) -> None:
        if self._sub is not None:
            self._sub.unsubscribe()
