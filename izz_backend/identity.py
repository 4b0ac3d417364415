"""
Identity client: authentication flows against the identity provider plus
lazy provisioning of user profile documents.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from izz_backend.errors import InvalidInputError, ProviderError, SessionMismatchError
from izz_backend.providers import SELECT_ACCOUNT_PARAMETERS, IdentityProvider
from izz_backend.store import DocumentRef, DocumentStore
from izz_backend.types import (
    GOOGLE_PROVIDER_ID,
    AuthUser,
    FederatedSignInStart,
    RegistrationResult,
    UserCredential,
)

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

PASSWORD_RESET_SENT = "Check your email for the password reset link."
EMAIL_UPDATED = "Email updated successfully"
VERIFICATION_EMAIL_SENT = "Verification email sent. Please verify your new email."
CREDENTIALS_REQUIRED = "Email and password are required"
NO_MATCHING_SESSION = "No user is currently signed in or UID mismatch"


class IdentityClient:
    """
    Mediates every authentication operation between the API and the
    identity provider, and owns the user profile documents.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        store: DocumentStore,
        users_collection: str = USERS_COLLECTION,
    ):
        self.provider = provider
        self.store = store
        self.users_collection = users_collection

    def start_google_sign_in(self, continue_uri: str) -> FederatedSignInStart:
        """Begins a Google sign-in that always shows the account chooser."""
        return self.provider.create_auth_uri(
            GOOGLE_PROVIDER_ID, continue_uri, SELECT_ACCOUNT_PARAMETERS
        )

    def sign_in_with_google_popup(
        self, request_uri: str, session_id: str, post_body: Optional[str] = None
    ) -> UserCredential:
        """
        Completes the Google sign-in started by `start_google_sign_in`.

        Args:
            request_uri: The URI the popup was redirected to.
            session_id: The session id returned when the flow started.
            post_body: Optional IdP response body (e.g. "id_token=...&providerId=google.com").

        Raises:
            ProviderError: If the user cancelled or the provider rejected the flow.
        """
        return self.provider.sign_in_with_idp(request_uri, session_id, post_body)

    def handle_password_reset(self, email: str) -> str:
        if not email:
            raise InvalidInputError("Email is required")
        try:
            self.provider.send_password_reset_email(email)
        except ProviderError as e:
            raise ProviderError(
                f"Password reset failed: {e.message}",
                code=e.code,
                status_code=e.status_code,
            ) from e
        return PASSWORD_RESET_SENT

    def create_user_with_email_and_password(
        self, email: str, password: str
    ) -> RegistrationResult:
        if not email or not password:
            raise InvalidInputError(CREDENTIALS_REQUIRED)
        credential = self.provider.create_user(email, password)
        return RegistrationResult(uid=credential.user.uid, user=credential.user)

    def sign_in_with_email_and_password(
        self, email: str, password: str
    ) -> UserCredential:
        if not email or not password:
            raise InvalidInputError(CREDENTIALS_REQUIRED)
        return self.provider.sign_in_with_password(email, password)

    def _require_current_user(self, uid: str) -> AuthUser:
        user = self.provider.current_user
        if user is None or user.uid != uid:
            raise SessionMismatchError(NO_MATCHING_SESSION)
        return user

    def update_user_email(self, uid: str, new_email: str) -> str:
        user = self._require_current_user(uid)
        try:
            self.provider.update_email(user, new_email)
        except ProviderError as e:
            raise ProviderError(
                f"Error updating email: {e.message}",
                code=e.code,
                status_code=e.status_code,
            ) from e
        return EMAIL_UPDATED

    def send_verification_email(self, uid: str, new_email: str) -> str:
        user = self._require_current_user(uid)
        try:
            self.provider.update_email(user, new_email)
            self.provider.send_email_verification(user)
        except ProviderError as e:
            raise ProviderError(
                f"Error sending verification email: {e.message}",
                code=e.code,
                status_code=e.status_code,
            ) from e
        return VERIFICATION_EMAIL_SENT

    def sign_out(self) -> None:
        self.provider.sign_out()

    def create_user_document_from_auth(
        self, user: Optional[AuthUser], additional_data: Optional[dict] = None
    ) -> Optional[DocumentRef]:
        """
        Creates the profile document for `user` unless it already exists.

        The existence check and the write are separate calls, so two
        concurrent first logins for the same uid can both write.

        Returns:
            The profile document reference, or None when `user` is None.
        """
        if user is None:
            return None

        doc_ref = self.store.document(self.users_collection, user.uid)
        if not self.store.exists(doc_ref):
            profile = {
                "displayName": user.display_name,
                "email": user.email,
                "createdAt": datetime.now(timezone.utc),
                **(additional_data or {}),
            }
            try:
                self.store.set(doc_ref, profile)
            except Exception:
                logger.exception("Error creating user document %s", doc_ref.path)
                raise
            logger.info("Created user document %s", doc_ref.path)

        return doc_ref

    def get_user_document(self, uid: str) -> Optional[dict]:
        return self.store.get(self.store.document(self.users_collection, uid))

    def list_user_documents(self, limit: int = 100) -> list[tuple[str, dict]]:
        return self.store.list(self.users_collection, limit=limit)
