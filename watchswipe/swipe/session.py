"""
Per-user swipe session.

A ``SwipeSession`` owns everything the swipe deck needs for one signed-in
user: the candidate pool, the index of the card on screen, the liked set and
the one-shot narrowing trigger. Changes to the liked set are applied locally
first and handed back as ``PendingWrite`` objects; the caller confirms or
rolls them back once the document store has answered.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from ..recommendations.models import WatchRecord
from ..recommendations.narrowing import TOP_STYLE_COUNT, narrow, top_styles

logger = logging.getLogger(__name__)

NARROW_THRESHOLD = 10


class WriteKind(str, Enum):
    like = "like"
    remove = "remove"


@dataclass(eq=False)
class PendingWrite:
    kind: WriteKind
    watch: WatchRecord
    position: int


@dataclass
class SwipeSession:
    user_id: str
    pool: list[WatchRecord] = field(default_factory=list)
    liked: list[WatchRecord] = field(default_factory=list)
    current: int = 0
    narrowed: bool = False
    narrowed_styles: list[str] = field(default_factory=list)
    narrow_threshold: int = NARROW_THRESHOLD
    top_style_count: int = TOP_STYLE_COUNT
    pending: list[PendingWrite] = field(default_factory=list)
    # request handlers run in a threadpool; hold this around any change
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def current_watch(self) -> WatchRecord | None:
        with self.lock:
            if 0 <= self.current < len(self.pool):
                return self.pool[self.current]
            return None

    def hydrate(self, liked: list[WatchRecord]) -> None:
        """Replace the liked set with the persisted one loaded at sign-in."""
        with self.lock:
            previous = len(self.liked)
            self.liked = list(liked)
            self._check_trigger(previous)

    def like(self) -> PendingWrite | None:
        with self.lock:
            watch = self.current_watch()
            if watch is None:
                return None
            if any(w.id == watch.id for w in self.liked):
                # already liked: move on, the liked set stays as it is
                self.current += 1
                return None
            previous = len(self.liked)
            self.liked.append(watch)
            write = PendingWrite(WriteKind.like, watch, previous)
            self.pending.append(write)
            self.current += 1
            self._check_trigger(previous)
            return write

    def dislike(self) -> WatchRecord | None:
        with self.lock:
            watch = self.current_watch()
            if watch is not None:
                self.current += 1
            return watch

    def remove(self, watch_id: str) -> PendingWrite | None:
        with self.lock:
            for position, watch in enumerate(self.liked):
                if watch.id == watch_id:
                    del self.liked[position]
                    write = PendingWrite(WriteKind.remove, watch, position)
                    self.pending.append(write)
                    return write
            return None

    def confirm(self, write: PendingWrite) -> None:
        with self.lock:
            if write in self.pending:
                self.pending.remove(write)

    def rollback(self, write: PendingWrite) -> None:
        """Undo a local change the store refused. Narrowing is never undone."""
        with self.lock:
            if write in self.pending:
                self.pending.remove(write)
            if write.kind is WriteKind.like:
                for position in range(len(self.liked) - 1, -1, -1):
                    if self.liked[position] is write.watch:
                        del self.liked[position]
                        break
            else:
                position = min(write.position, len(self.liked))
                self.liked.insert(position, write.watch)

    def _check_trigger(self, previous: int) -> None:
        # fires once, on the transition onto the threshold
        if self.narrowed:
            return
        if previous < self.narrow_threshold and len(self.liked) == self.narrow_threshold:
            self.narrowed_styles = top_styles(self.liked, self.top_style_count)
            self.pool = narrow(self.liked, self.pool, self.top_style_count)
            self.current = 0
            self.narrowed = True
            logger.info(
                "Narrowed pool for %s to %d watches on styles %s",
                self.user_id,
                len(self.pool),
                self.narrowed_styles,
            )


class SessionRegistry:
    """Thread-safe map of user id to open ``SwipeSession``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: dict[str, SwipeSession] = {}

    def get(self, user_id: str) -> SwipeSession | None:
        with self._lock:
            return self._sessions.get(user_id)

    def open(self, session: SwipeSession) -> SwipeSession:
        with self._lock:
            self._sessions[session.user_id] = session
        logger.info("Opened swipe session for %s", session.user_id)
        return session

    def close(self, user_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(user_id, None)
        if removed is not None:
            logger.info("Closed swipe session for %s", user_id)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


sessions = SessionRegistry()
