from __future__ import annotations

import logging
from typing import Any

from ..store.documents import USERS, DocumentStore
from .models import UserProfile

logger = logging.getLogger(__name__)


def split_display_name(display_name: str) -> tuple[str, str]:
    """First word is the first name, the rest is the last name."""
    parts = display_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def fetch_profile(store: DocumentStore, user_id: str) -> UserProfile | None:
    try:
        docs = store.query(USERS, "user_id", user_id)
    except Exception:
        logger.warning("Error fetching user data for %s", user_id, exc_info=True)
        return None
    if not docs:
        return None
    return UserProfile(**docs[0].data)


def create_profile(
    store: DocumentStore,
    identity: dict[str, Any],
    first_name: str,
    last_name: str,
) -> UserProfile | None:
    profile = UserProfile(
        user_id=identity["uid"],
        first_name=first_name,
        last_name=last_name,
        email=identity["email"],
        onboarding_complete=False,
    )
    try:
        store.set(USERS, profile.user_id, profile.model_dump())
    except Exception:
        logger.warning("Error creating profile for %s", profile.user_id, exc_info=True)
        return None
    return profile


def ensure_federated_profile(store: DocumentStore, identity: dict[str, Any]) -> UserProfile | None:
    """Return the existing profile, creating one on first federated sign-in."""
    existing = fetch_profile(store, identity["uid"])
    if existing is not None:
        return existing
    first_name, last_name = split_display_name(identity.get("display_name") or "")
    return create_profile(store, identity, first_name, last_name)


def complete_onboarding(
    store: DocumentStore,
    user_id: str,
    wrist_size: float | None,
    owned_watches: list[str],
) -> bool:
    try:
        store.update(USERS, user_id, {
            "wrist_size": wrist_size,
            "owned_watches": list(owned_watches),
            "onboarding_complete": True,
        })
    except Exception:
        logger.warning("Error saving onboarding data for %s", user_id, exc_info=True)
        return False
    logger.info("Onboarding completed for %s", user_id)
    return True


def update_wrist_size(store: DocumentStore, user_id: str, wrist_size: float) -> bool:
    try:
        store.update(USERS, user_id, {"wrist_size": wrist_size})
    except Exception:
        logger.warning("Error updating wrist size for %s", user_id, exc_info=True)
        return False
    return True
