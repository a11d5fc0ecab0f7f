from __future__ import annotations

from pydantic import BaseModel, Field

from ..recommendations.models import WatchRecord


class UserProfile(BaseModel):
    user_id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    wrist_size: float | None = None
    owned_watches: list[str] = Field(default_factory=list)
    liked_watches: list[WatchRecord] = Field(default_factory=list)
    onboarding_complete: bool = False


class SignUpRequest(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class FederatedSignInRequest(BaseModel):
    provider: str = Field(default="google", min_length=1)
    id_token: str = Field(..., min_length=1, description="Signed ID token issued by the provider")


class OnboardingDraft(BaseModel):
    owned_watches: list[str] = Field(default_factory=list)


class OwnedWatchRequest(BaseModel):
    name: str = Field(..., min_length=1)


class OnboardingRequest(BaseModel):
    wrist_size: float | None = Field(default=None, gt=0, description="Wrist size in cm")
    owned_watches: list[str] | None = Field(
        default=None,
        description="Owned watch names; falls back to the session draft when omitted",
    )


class ProfileUpdateRequest(BaseModel):
    wrist_size: float = Field(..., gt=0)
