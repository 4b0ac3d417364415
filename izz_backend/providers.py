"""
Identity provider abstraction for Firebase Authentication and in-memory testing.

Both implementations keep an ambient "current user" session the way the
Firebase client SDK does: the last successful sign-in becomes the current
user until sign-out or the next sign-in.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol
from urllib.parse import parse_qs, urlencode

import requests

from izz_backend.errors import ProviderError
from izz_backend.types import (
    GOOGLE_PROVIDER_ID,
    PASSWORD_PROVIDER_ID,
    AccountPayload,
    AuthUser,
    FederatedSignInStart,
    UserCredential,
)

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
REQUEST_TIMEOUT = 30  # seconds

# Forces Google to show the account chooser instead of reusing a session.
SELECT_ACCOUNT_PARAMETERS = {"prompt": "select_account"}


class IdentityProvider(Protocol):
    """Defines the operations the API needs from the identity platform."""

    @property
    def current_user(self) -> Optional[AuthUser]:
        ...

    def create_user(self, email: str, password: str) -> UserCredential:
        ...

    def sign_in_with_password(self, email: str, password: str) -> UserCredential:
        ...

    def create_auth_uri(
        self,
        provider_id: str,
        continue_uri: str,
        custom_parameters: Optional[dict] = None,
    ) -> FederatedSignInStart:
        ...

    def sign_in_with_idp(
        self, request_uri: str, session_id: str, post_body: Optional[str] = None
    ) -> UserCredential:
        ...

    def send_password_reset_email(self, email: str) -> None:
        ...

    def update_email(self, user: AuthUser, new_email: str) -> None:
        ...

    def send_email_verification(self, user: AuthUser) -> None:
        ...

    def sign_out(self) -> None:
        ...


@dataclass
class _Account:
    user: AuthUser
    password: Optional[str] = None


@dataclass
class InMemoryIdentityProvider:
    """Test double for Firebase Authentication."""

    base_url: str = "https://example.test/auth"
    accounts: Dict[str, _Account] = field(default_factory=dict)
    pending_sign_ins: Dict[str, str] = field(default_factory=dict)
    sent_emails: List[tuple] = field(default_factory=list)
    _current: Optional[AuthUser] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current

    def reset(self) -> None:
        self.accounts.clear()
        self.pending_sign_ins.clear()
        self.sent_emails.clear()
        self._current = None

    def _find(self, email: str) -> Optional[_Account]:
        for account in self.accounts.values():
            if account.user.email == email:
                return account
        return None

    def _sign_in(self, account: _Account, *, is_new_user: bool) -> UserCredential:
        self._current = account.user
        return UserCredential(
            user=account.user,
            id_token=f"id-token-{account.user.uid}",
            refresh_token=f"refresh-token-{account.user.uid}",
            expires_in=3600,
            provider_id=account.user.provider_id,
            is_new_user=is_new_user,
        )

    def _new_account(
        self, email: str, provider_id: str, password: Optional[str] = None
    ) -> _Account:
        user = AuthUser(
            uid=uuid.uuid4().hex[:28],
            email=email,
            provider_id=provider_id,
            created_at=datetime.now(timezone.utc),
        )
        account = _Account(user=user, password=password)
        self.accounts[user.uid] = account
        return account

    def create_user(self, email: str, password: str) -> UserCredential:
        if self._find(email):
            raise ProviderError("EMAIL_EXISTS", code="EMAIL_EXISTS")
        if len(password) < 6:
            raise ProviderError(
                "WEAK_PASSWORD : Password should be at least 6 characters",
                code="WEAK_PASSWORD",
            )
        account = self._new_account(email, PASSWORD_PROVIDER_ID, password)
        return self._sign_in(account, is_new_user=True)

    def sign_in_with_password(self, email: str, password: str) -> UserCredential:
        account = self._find(email)
        if not account or account.password != password:
            raise ProviderError(
                "INVALID_LOGIN_CREDENTIALS", code="INVALID_LOGIN_CREDENTIALS"
            )
        return self._sign_in(account, is_new_user=False)

    def create_auth_uri(
        self,
        provider_id: str,
        continue_uri: str,
        custom_parameters: Optional[dict] = None,
    ) -> FederatedSignInStart:
        session_id = uuid.uuid4().hex
        self.pending_sign_ins[session_id] = continue_uri
        query = urlencode(
            {"redirect_uri": continue_uri, "state": session_id, **(custom_parameters or {})}
        )
        return FederatedSignInStart(
            auth_uri=f"{self.base_url}/{provider_id}?{query}",
            session_id=session_id,
            provider_id=provider_id,
        )

    def sign_in_with_idp(
        self, request_uri: str, session_id: str, post_body: Optional[str] = None
    ) -> UserCredential:
        if self.pending_sign_ins.pop(session_id, None) is None:
            raise ProviderError("INVALID_IDP_RESPONSE", code="INVALID_IDP_RESPONSE")
        query = post_body or request_uri.partition("?")[2]
        email = (parse_qs(query).get("email") or [None])[0]
        if not email:
            # The user closed the popup or denied consent.
            raise ProviderError("USER_CANCELLED", code="USER_CANCELLED")
        account = self._find(email)
        is_new_user = account is None
        if account is None:
            account = self._new_account(email, GOOGLE_PROVIDER_ID)
            account.user.email_verified = True
        return self._sign_in(account, is_new_user=is_new_user)

    def send_password_reset_email(self, email: str) -> None:
        if not self._find(email):
            raise ProviderError("EMAIL_NOT_FOUND", code="EMAIL_NOT_FOUND")
        self.sent_emails.append(("PASSWORD_RESET", email))

    def update_email(self, user: AuthUser, new_email: str) -> None:
        if user.uid not in self.accounts:
            raise ProviderError("USER_NOT_FOUND", code="USER_NOT_FOUND")
        existing = self._find(new_email)
        if existing and existing.user.uid != user.uid:
            raise ProviderError("EMAIL_EXISTS", code="EMAIL_EXISTS")
        stored = self.accounts[user.uid].user
        stored.email = new_email
        stored.email_verified = False

    def send_email_verification(self, user: AuthUser) -> None:
        if user.uid not in self.accounts:
            raise ProviderError("USER_NOT_FOUND", code="USER_NOT_FOUND")
        self.sent_emails.append(("VERIFY_EMAIL", self.accounts[user.uid].user.email))

    def sign_out(self) -> None:
        self._current = None


class FirebaseIdentityProvider:
    """
    Firebase Authentication client backed by the Identity Toolkit REST API.

    The Admin SDK cannot verify passwords or send the provider's templated
    emails, so end-user flows go through the same REST endpoints the web SDK
    uses, authenticated with the project's web API key.
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http = session or requests.Session()
        self._credential: Optional[UserCredential] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._credential.user if self._credential else None

    def _post(self, method: str, payload: dict) -> dict:
        url = f"{IDENTITY_TOOLKIT_URL}/accounts:{method}"
        try:
            response = self._http.post(
                url, params={"key": self.api_key}, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("Identity Toolkit %s request failed: %s", method, e)
            raise ProviderError(
                f"NETWORK_REQUEST_FAILED : {e}",
                code="NETWORK_REQUEST_FAILED",
                status_code=503,
            ) from e

        if response.status_code >= 400:
            try:
                message = response.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = response.text or f"HTTP {response.status_code}"
            logger.warning("Identity Toolkit %s rejected: %s", method, message)
            raise ProviderError(
                message,
                code=message.split(" ")[0],
                status_code=response.status_code,
            )
        return response.json()

    def _remember(self, credential: UserCredential) -> UserCredential:
        self._credential = credential
        return credential

    def _id_token_for(self, user: AuthUser) -> str:
        if not self._credential or self._credential.user.uid != user.uid:
            raise ProviderError(
                "CREDENTIAL_TOO_OLD_LOGIN_AGAIN", code="CREDENTIAL_TOO_OLD_LOGIN_AGAIN"
            )
        return self._credential.id_token

    def create_user(self, email: str, password: str) -> UserCredential:
        data = self._post(
            "signUp", {"email": email, "password": password, "returnSecureToken": True}
        )
        credential = AccountPayload.from_response(data).to_credential()
        credential.is_new_user = True
        return self._remember(credential)

    def sign_in_with_password(self, email: str, password: str) -> UserCredential:
        data = self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._remember(AccountPayload.from_response(data).to_credential())

    def create_auth_uri(
        self,
        provider_id: str,
        continue_uri: str,
        custom_parameters: Optional[dict] = None,
    ) -> FederatedSignInStart:
        payload = {"providerId": provider_id, "continueUri": continue_uri}
        if custom_parameters:
            payload["customParameter"] = custom_parameters
        data = self._post("createAuthUri", payload)
        return FederatedSignInStart(
            auth_uri=data["authUri"],
            session_id=data["sessionId"],
            provider_id=data.get("providerId", provider_id),
        )

    def sign_in_with_idp(
        self, request_uri: str, session_id: str, post_body: Optional[str] = None
    ) -> UserCredential:
        payload = {
            "requestUri": request_uri,
            "sessionId": session_id,
            "returnSecureToken": True,
            "returnIdpCredential": True,
        }
        if post_body:
            payload["postBody"] = post_body
        data = self._post("signInWithIdp", payload)
        account = AccountPayload.from_response(data)
        return self._remember(account.to_credential(default_provider=GOOGLE_PROVIDER_ID))

    def send_password_reset_email(self, email: str) -> None:
        self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    def update_email(self, user: AuthUser, new_email: str) -> None:
        data = self._post(
            "update",
            {
                "idToken": self._id_token_for(user),
                "email": new_email,
                "returnSecureToken": True,
            },
        )
        # Changing the email revokes the old token; keep the session usable.
        self._credential.id_token = data.get("idToken") or self._credential.id_token
        self._credential.refresh_token = (
            data.get("refreshToken") or self._credential.refresh_token
        )
        self._credential.user.email = data.get("email", new_email)
        self._credential.user.email_verified = bool(data.get("emailVerified"))

    def send_email_verification(self, user: AuthUser) -> None:
        self._post(
            "sendOobCode",
            {"requestType": "VERIFY_EMAIL", "idToken": self._id_token_for(user)},
        )

    def sign_out(self) -> None:
        self._credential = None
