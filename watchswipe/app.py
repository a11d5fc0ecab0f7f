from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_swipe_session, require_user
from .auth.users import (
    AuthError,
    authenticate,
    authenticate_federated,
    register,
    sign_out,
    subscribe,
)
from .catalog.search import catalog_metadata, search_watches
from .config import DEFAULT_APP_CONFIG
from .profiles.models import (
    FederatedSignInRequest,
    LoginRequest,
    OnboardingDraft,
    OnboardingRequest,
    OwnedWatchRequest,
    ProfileUpdateRequest,
    SignUpRequest,
    UserProfile,
)
from .profiles.service import (
    complete_onboarding,
    create_profile,
    ensure_federated_profile,
    fetch_profile,
    update_wrist_size,
)
from .recommendations.models import (
    SavedWatchesResponse,
    SwipeStateResponse,
    WatchRecord,
)
from .store.client import get_store
from .store.documents import DocumentStore
from .swipe.actions import record_dislike, record_like, remove_saved, start_session
from .swipe.session import SwipeSession, sessions

logging.basicConfig(level=DEFAULT_APP_CONFIG.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="WatchSwipe API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)


def _on_auth_state_changed(uid: str, identity: dict[str, Any] | None) -> None:
    if identity is None:
        sessions.close(uid)
        return
    sessions.open(start_session(get_store(), uid))


subscribe(_on_auth_state_changed)


def _onboarding_required(profile: UserProfile | None) -> bool:
    return profile is None or not profile.onboarding_complete


def _signed_in(request: Request, identity: dict[str, Any], profile: UserProfile | None) -> dict:
    previous = request.session.get("user")
    if previous and previous.get("uid") != identity["uid"]:
        sign_out(previous["uid"])
    request.session["user"] = identity
    request.session.pop("onboarding_draft", None)
    return {
        "status": "ok",
        "user": identity,
        "onboarding_required": _onboarding_required(profile),
    }


def _load_draft(request: Request) -> OnboardingDraft:
    raw = request.session.get("onboarding_draft")
    return OnboardingDraft(**raw) if raw else OnboardingDraft()


def _swipe_state(session: SwipeSession) -> SwipeStateResponse:
    with session.lock:
        return SwipeStateResponse(
            watch=session.current_watch(),
            position=session.current,
            pool_size=len(session.pool),
            liked_count=len(session.liked),
            narrowed=session.narrowed,
            top_styles=list(session.narrowed_styles),
        )


def _saved(session: SwipeSession) -> SavedWatchesResponse:
    with session.lock:
        liked = list(session.liked)
    return SavedWatchesResponse(watches=liked, total=len(liked))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return catalog_metadata()


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup")
def signup(
    body: SignUpRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
) -> dict:
    try:
        identity = register(body.email, body.password, f"{body.first_name} {body.last_name}")
    except AuthError:
        logger.warning("Sign-up failed", exc_info=True)
        raise HTTPException(status_code=400, detail="Sign-up failed")
    profile = create_profile(store, identity, body.first_name, body.last_name)
    return _signed_in(request, identity, profile)


@app.post("/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
) -> dict:
    identity = authenticate(body.email, body.password)
    if not identity:
        logger.warning("Login failed for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _signed_in(request, identity, fetch_profile(store, identity["uid"]))


@app.post("/auth/federated")
def federated_login(
    body: FederatedSignInRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
) -> dict:
    try:
        identity = authenticate_federated(body.provider, body.id_token)
    except AuthError:
        logger.warning("Federated sign-in failed", exc_info=True)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    profile = ensure_federated_profile(store, identity)
    return _signed_in(request, identity, profile)


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    user = request.session.get("user")
    if user:
        sign_out(user["uid"])
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Onboarding ───────────────────────────────────────────────────────────


@app.get("/onboarding")
def onboarding_status(
    request: Request,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    profile = fetch_profile(store, user["uid"])
    return {
        "required": _onboarding_required(profile),
        "draft": _load_draft(request).model_dump(),
    }


@app.get("/onboarding/search", response_model=list[WatchRecord])
def onboarding_search(q: str = "", user: dict = Depends(require_user)) -> list[WatchRecord]:
    return search_watches(q)


@app.post("/onboarding/owned", response_model=OnboardingDraft)
def add_owned_watch(
    body: OwnedWatchRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> OnboardingDraft:
    draft = _load_draft(request)
    draft.owned_watches.append(body.name)
    request.session["onboarding_draft"] = draft.model_dump()
    return draft


@app.delete("/onboarding/owned/{index}", response_model=OnboardingDraft)
def remove_owned_watch(
    index: int,
    request: Request,
    user: dict = Depends(require_user),
) -> OnboardingDraft:
    draft = _load_draft(request)
    if not 0 <= index < len(draft.owned_watches):
        raise HTTPException(status_code=404, detail="Owned watch not found")
    del draft.owned_watches[index]
    request.session["onboarding_draft"] = draft.model_dump()
    return draft


@app.post("/onboarding")
def submit_onboarding(
    body: OnboardingRequest,
    request: Request,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    owned = body.owned_watches
    if owned is None:
        owned = _load_draft(request).owned_watches
    saved = complete_onboarding(store, user["uid"], body.wrist_size, owned)
    if saved:
        request.session.pop("onboarding_draft", None)
    profile = fetch_profile(store, user["uid"])
    return {
        "onboarding_required": _onboarding_required(profile),
        "profile": profile.model_dump() if profile else None,
    }


# ── Profile ──────────────────────────────────────────────────────────────


@app.get("/profile", response_model=UserProfile)
def get_profile(
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
) -> UserProfile:
    profile = fetch_profile(store, user["uid"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@app.patch("/profile", response_model=UserProfile)
def patch_profile(
    body: ProfileUpdateRequest,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
) -> UserProfile:
    update_wrist_size(store, user["uid"], body.wrist_size)
    profile = fetch_profile(store, user["uid"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


# ── Swipe deck ───────────────────────────────────────────────────────────


@app.get("/swipe", response_model=SwipeStateResponse)
def swipe_state(session: SwipeSession = Depends(require_swipe_session)) -> SwipeStateResponse:
    return _swipe_state(session)


@app.post("/swipe/like", response_model=SwipeStateResponse)
def swipe_like(
    session: SwipeSession = Depends(require_swipe_session),
    store: DocumentStore = Depends(get_store),
) -> SwipeStateResponse:
    record_like(session, store)
    return _swipe_state(session)


@app.post("/swipe/dislike", response_model=SwipeStateResponse)
def swipe_dislike(session: SwipeSession = Depends(require_swipe_session)) -> SwipeStateResponse:
    record_dislike(session)
    return _swipe_state(session)


# ── Saved watches ────────────────────────────────────────────────────────


@app.get("/saved", response_model=SavedWatchesResponse)
def saved_watches(session: SwipeSession = Depends(require_swipe_session)) -> SavedWatchesResponse:
    return _saved(session)


@app.delete("/saved/{watch_id}", response_model=SavedWatchesResponse)
def delete_saved_watch(
    watch_id: str,
    session: SwipeSession = Depends(require_swipe_session),
    store: DocumentStore = Depends(get_store),
) -> SavedWatchesResponse:
    if not any(w.id == watch_id for w in session.liked):
        raise HTTPException(status_code=404, detail="Watch not in saved list")
    remove_saved(session, store, watch_id)
    return _saved(session)
