"""
Pydantic schemas for the izz FastAPI backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from izz_backend.types import AuthUser, UserCredential


class MessageResponse(BaseModel):
    message: str


class CredentialsRequest(BaseModel):
    # Left optional so missing values reach the identity client's own check.
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(CredentialsRequest):
    display_name: Optional[str] = None
    profile: Optional[dict] = None


class UserResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False
    provider_id: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: AuthUser) -> "UserResponse":
        return cls(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            email_verified=user.email_verified,
            provider_id=user.provider_id,
            created_at=user.created_at,
        )


class RegisterResponse(BaseModel):
    uid: str
    user: UserResponse


class CredentialResponse(BaseModel):
    user: UserResponse
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    provider_id: str
    is_new_user: bool = False

    @classmethod
    def from_credential(cls, credential: UserCredential) -> "CredentialResponse":
        return cls(
            user=UserResponse.from_user(credential.user),
            id_token=credential.id_token,
            refresh_token=credential.refresh_token,
            expires_in=credential.expires_in,
            provider_id=credential.provider_id,
            is_new_user=credential.is_new_user,
        )


class GoogleSignInStartResponse(BaseModel):
    auth_uri: str
    session_id: str
    provider_id: str


class GoogleSignInRequest(BaseModel):
    request_uri: str
    session_id: str
    post_body: Optional[str] = None


class PasswordResetRequest(BaseModel):
    email: Optional[str] = None


class UpdateEmailRequest(BaseModel):
    uid: str
    new_email: str = Field(..., min_length=3, max_length=320)


class ProfileResponse(BaseModel):
    uid: str
    profile: dict[str, Any]


class ListProfilesResponse(BaseModel):
    users: list[ProfileResponse]


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    completed: bool = False


class TaskUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    completed: Optional[bool] = None


class TaskResponse(BaseModel):
    task_id: str
    title: str
    description: Optional[str] = None
    completed: bool = False
    created_at: Optional[datetime] = None


class ListTasksResponse(BaseModel):
    tasks: list[TaskResponse]
