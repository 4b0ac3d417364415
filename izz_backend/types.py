"""
Dataclasses describing identities, credentials and sign-in handshakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dacite import Config, from_dict

from izz_backend.json_utils import convert_keys

GOOGLE_PROVIDER_ID = "google.com"
PASSWORD_PROVIDER_ID = "password"


@dataclass
class AuthUser:
    """A user as known to the identity provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False
    provider_id: str = PASSWORD_PROVIDER_ID
    created_at: Optional[datetime] = None


@dataclass
class UserCredential:
    """Result of a successful sign-in or sign-up."""

    user: AuthUser
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    provider_id: str = PASSWORD_PROVIDER_ID
    is_new_user: bool = False


@dataclass
class RegistrationResult:
    uid: str
    user: AuthUser


@dataclass
class FederatedSignInStart:
    """Where to send the browser to start a federated sign-in."""

    auth_uri: str
    session_id: str
    provider_id: str = GOOGLE_PROVIDER_ID


@dataclass
class AccountPayload:
    """
    The account fields shared by Identity Toolkit responses
    (signUp, signInWithPassword, signInWithIdp, update, lookup).
    """

    local_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[str] = None
    email_verified: Optional[bool] = None
    is_new_user: Optional[bool] = None
    provider_id: Optional[str] = None
    # Milliseconds since epoch, as a string.
    created_at: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict) -> "AccountPayload":
        return from_dict(
            data_class=cls,
            data=convert_keys(data, "camel_to_snake"),
            config=Config(check_types=False),
        )

    def to_user(self, default_provider: str = PASSWORD_PROVIDER_ID) -> AuthUser:
        created_at = None
        if self.created_at:
            created_at = datetime.fromtimestamp(
                int(self.created_at) / 1000, tz=timezone.utc
            )
        return AuthUser(
            uid=self.local_id,
            email=self.email,
            display_name=self.display_name or None,
            email_verified=bool(self.email_verified),
            provider_id=self.provider_id or default_provider,
            created_at=created_at,
        )

    def to_credential(
        self, default_provider: str = PASSWORD_PROVIDER_ID
    ) -> UserCredential:
        return UserCredential(
            user=self.to_user(default_provider),
            id_token=self.id_token or "",
            refresh_token=self.refresh_token,
            expires_in=int(self.expires_in) if self.expires_in else None,
            provider_id=self.provider_id or default_provider,
            is_new_user=bool(self.is_new_user),
        )
