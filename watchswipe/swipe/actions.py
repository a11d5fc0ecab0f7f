from __future__ import annotations

import logging

from ..catalog.data_store import fetch_all_watches
from ..config import DEFAULT_APP_CONFIG, AppConfig
from ..profiles.service import fetch_profile
from ..recommendations.models import WatchRecord
from ..store.documents import USERS, ArrayRemove, ArrayUnion, DocumentStore
from .session import PendingWrite, SwipeSession

logger = logging.getLogger(__name__)


def start_session(
    store: DocumentStore,
    user_id: str,
    config: AppConfig = DEFAULT_APP_CONFIG,
) -> SwipeSession:
    """Build a fresh session: full catalog pool plus the persisted liked set."""
    session = SwipeSession(
        user_id=user_id,
        pool=fetch_all_watches(store),
        narrow_threshold=config.narrow_threshold,
        top_style_count=config.top_style_count,
    )
    profile = fetch_profile(store, user_id)
    if profile is not None:
        session.hydrate(profile.liked_watches)
    return session


def _push(
    session: SwipeSession,
    store: DocumentStore,
    write: PendingWrite,
    changes: dict,
    action: str,
) -> bool:
    try:
        store.update(USERS, session.user_id, changes)
    except Exception:
        logger.warning(
            "Error on %s of %s for %s, rolling back",
            action, write.watch.id, session.user_id,
            exc_info=True,
        )
        session.rollback(write)
        return False
    session.confirm(write)
    return True


def record_like(session: SwipeSession, store: DocumentStore) -> WatchRecord | None:
    """Like the card on screen. Returns the liked watch, or None if the deck is empty."""
    # held across the push so a concurrent like sees the reconciled state
    with session.lock:
        write = session.like()
        if write is None:
            return None
        snapshot = write.watch.model_dump()
        _push(session, store, write, {"liked_watches": ArrayUnion([snapshot])}, "like")
        return write.watch


def record_dislike(session: SwipeSession) -> WatchRecord | None:
    return session.dislike()


def remove_saved(session: SwipeSession, store: DocumentStore, watch_id: str) -> bool:
    """Remove a liked watch. False if it was not liked or the store refused."""
    with session.lock:
        write = session.remove(watch_id)
        if write is None:
            return False
        snapshot = write.watch.model_dump()
        return _push(session, store, write, {"liked_watches": ArrayRemove([snapshot])}, "remove")
