"""Request / response schemas for the auth routes."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Fields are optional so that missing values reach the service and are
# reported as 400 "required" errors rather than schema failures.


class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class GoogleSignInRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # any JSON value; non-strings are rejected by the verifier as invalid tokens
    id_token: Optional[Any] = Field(default=None, alias="idToken")


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: Optional[str] = None


class UserProfile(BaseModel):
    id: str
    username: str
    name: Optional[str] = None


class MeResponse(BaseModel):
    success: bool = True
    user: UserProfile
