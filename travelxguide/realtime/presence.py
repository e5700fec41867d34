"""Process-local presence tracking for connected sockets.

The online counter counts sockets, not distinct users: one user with two tabs
open counts twice. Counts are not aggregated across worker processes.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)

ONLINE_USERS_EVENT = "onlineUsers"


class PresenceTracker:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sockets: dict[str, int | None] = {}

    def add(self, sid: str, user_id: int | None = None) -> int:
        with self._lock:
            self._sockets[sid] = user_id
            return len(self._sockets)

    def discard(self, sid: str) -> int:
        with self._lock:
            self._sockets.pop(sid, None)
            return len(self._sockets)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._sockets)

    def user_ids(self) -> set[int]:
        with self._lock:
            return {uid for uid in self._sockets.values() if uid is not None}

    def clear(self) -> None:
        with self._lock:
            self._sockets.clear()


tracker = PresenceTracker()


class PresenceBroadcaster:
    """Re-emits the online count on a fixed interval.

    Started lazily on the first connection because the Socket.IO server only
    has a running event loop once it is serving requests.
    """

    def __init__(self, server, presence: PresenceTracker, interval: float) -> None:
        self.server = server
        self.presence = presence
        self.interval = interval
        self._task = None

    @property
    def started(self) -> bool:
        return self._task is not None

    def ensure_started(self) -> None:
        if self._task is None and self.interval > 0:
            self._task = self.server.start_background_task(self._run)
            logger.info("Presence broadcast every %ss", self.interval)

    async def broadcast(self) -> None:
        await self.server.emit(ONLINE_USERS_EVENT, self.presence.count)

    async def _run(self) -> None:
        while True:
            await self.server.sleep(self.interval)
            try:
                await self.broadcast()
            except Exception:
                logger.exception("Presence broadcast failed")
