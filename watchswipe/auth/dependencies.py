from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from ..store.client import get_store
from ..store.documents import DocumentStore
from ..swipe.actions import start_session
from ..swipe.session import SwipeSession, sessions


def require_user(request: Request) -> dict:
    """Raise 401 if no user is signed in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_swipe_session(
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
) -> SwipeSession:
    """Return the user's swipe session, opening one if the process lost it."""
    session = sessions.get(user["uid"])
    if session is None:
        session = sessions.open(start_session(store, user["uid"]))
    return session
