from __future__ import annotations

"""Live change feed for draft_picks inserts.

A process-local pub/sub hub: LeagueRepo publishes one ChangeEvent per committed
draft_picks insert, and every subscriber of that game receives it.

Contract for consumers:
  - an event means "something changed, refetch"; it carries no state to merge
  - delivery is at-least-once and may be coalesced or reordered
  - subscribe first, then do a full refresh, then refresh on every event

publish() may be called from any thread; delivery is scheduled onto each
subscriber's own event loop.
"""

import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import config

from .types import norm_id

logger = logging.getLogger(__name__)

_CLOSED = object()


class SubscriptionClosed(Exception):
    pass


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    table: str
    game_id: str
    op: str = "INSERT"
    row_id: Optional[Any] = None
    seq: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"table": self.table, "game_id": self.game_id, "op": self.op, "row_id": self.row_id, "seq": self.seq}


class Subscription:
    """Cancellable stream of ChangeEvents for one (table, game)."""

    def __init__(self, feed: "DraftChangeFeed", *, table: str, game_id: str,
                 loop: asyncio.AbstractEventLoop, maxsize: int) -> None:
        self._feed = feed
        self.table = table
        self.game_id = game_id
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, int(maxsize)))
        self.closed = False
        self.dropped = 0

    # -- delivery (runs on the subscriber loop) --

    def _offer(self, item: Any) -> None:
        if item is _CLOSED:
            while self._queue.full():
                self._queue.get_nowait()
            self._queue.put_nowait(item)
            return
        if self.closed:
            return
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            # A pending signal already forces a refetch; the newest one adds nothing.
            self.dropped += 1

    def _deliver_threadsafe(self, item: Any) -> bool:
        try:
            self._loop.call_soon_threadsafe(self._offer, item)
        except RuntimeError:
            # subscriber loop is gone
            return False
        return True

    # -- consumer API --

    async def get(self) -> ChangeEvent:
        if self.closed and self._queue.empty():
            raise SubscriptionClosed(f"subscription closed (game_id={self.game_id})")
        item = await self._queue.get()
        if item is _CLOSED:
            self.closed = True
            raise SubscriptionClosed(f"subscription closed (game_id={self.game_id})")
        return item

    def drain_pending(self) -> int:
        """Discard already-queued events (one refetch covers them). Returns how many."""
        n = 0
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                self._queue.put_nowait(item)
                break
            n += 1
        return n

    def unsubscribe(self) -> None:
        """Stop delivery. In-flight store operations are unaffected."""
        if self.closed:
            return
        self.closed = True
        self._feed._remove(self)
        self._deliver_threadsafe(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration


class DraftChangeFeed:
    def __init__(self, *, queue_maxsize: int = config.FEED_QUEUE_MAXSIZE) -> None:
        self._lock = threading.Lock()
        self._subs: Dict[tuple, List[Subscription]] = {}
        self._seq = itertools.count(1)
        self._queue_maxsize = int(queue_maxsize)

    def subscribe(self, game_id: str, *, table: str = "draft_picks") -> Subscription:
        """Subscribe the running event loop to inserts on `table` for `game_id`."""
        loop = asyncio.get_running_loop()
        sub = Subscription(self, table=str(table), game_id=norm_id(game_id), loop=loop,
                           maxsize=self._queue_maxsize)
        with self._lock:
            self._subs.setdefault((sub.table, sub.game_id), []).append(sub)
        logger.debug("feed subscribe table=%s game_id=%s", sub.table, sub.game_id)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get((sub.table, sub.game_id))
            if not subs:
                return
            try:
                subs.remove(sub)
            except ValueError:
                return
            if not subs:
                del self._subs[(sub.table, sub.game_id)]
        logger.debug("feed unsubscribe table=%s game_id=%s", sub.table, sub.game_id)

    def publish_insert(self, table: str, game_id: str, *, row_id: Any = None) -> int:
        """Fan out one insert notification. Returns the number of subscribers reached."""
        ev = ChangeEvent(table=str(table), game_id=norm_id(game_id), op="INSERT", row_id=row_id, seq=next(self._seq))
        with self._lock:
            subs = list(self._subs.get((ev.table, ev.game_id), ()))
        reached = 0
        for sub in subs:
            if sub._deliver_threadsafe(ev):
                reached += 1
            else:
                logger.warning("dropping dead subscriber table=%s game_id=%s", sub.table, sub.game_id)
                sub.closed = True
                self._remove(sub)
        return reached

    def subscriber_count(self, game_id: str, *, table: str = "draft_picks") -> int:
        with self._lock:
            return len(self._subs.get((str(table), norm_id(game_id)), ()))

    def close_all(self) -> None:
        with self._lock:
            subs = [s for group in self._subs.values() for s in group]
        for s in subs:
            s.unsubscribe()


DEFAULT_FEED = DraftChangeFeed()
