"""
Authentication routes: registration, sign-in, Google sign-in and password reset.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from izz_backend.config import Settings
from izz_backend.dependencies import get_app_settings, get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.schemas import (
    CredentialResponse,
    CredentialsRequest,
    GoogleSignInRequest,
    GoogleSignInStartResponse,
    MessageResponse,
    PasswordResetRequest,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    payload: RegisterRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    result = identity.create_user_with_email_and_password(
        payload.email, payload.password
    )
    extra = dict(payload.profile or {})
    if payload.display_name:
        extra["displayName"] = payload.display_name
    identity.create_user_document_from_auth(result.user, extra)
    logger.info("Registered user %s", result.uid)
    return RegisterResponse(uid=result.uid, user=UserResponse.from_user(result.user))


@router.post("/login", response_model=CredentialResponse)
def login(
    payload: CredentialsRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    credential = identity.sign_in_with_email_and_password(
        payload.email, payload.password
    )
    identity.create_user_document_from_auth(credential.user)
    return CredentialResponse.from_credential(credential)


@router.get("/google", response_model=GoogleSignInStartResponse)
def start_google_sign_in(
    continue_uri: Optional[str] = Query(None),
    identity: IdentityClient = Depends(get_identity_client),
    settings: Settings = Depends(get_app_settings),
):
    """
    Returns the Google authorization URI for the client to open in a popup.
    """
    start = identity.start_google_sign_in(continue_uri or settings.google_continue_uri)
    return GoogleSignInStartResponse(
        auth_uri=start.auth_uri,
        session_id=start.session_id,
        provider_id=start.provider_id,
    )


@router.post("/google", response_model=CredentialResponse)
def google_sign_in(
    payload: GoogleSignInRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    credential = identity.sign_in_with_google_popup(
        payload.request_uri, payload.session_id, payload.post_body
    )
    identity.create_user_document_from_auth(credential.user)
    return CredentialResponse.from_credential(credential)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: PasswordResetRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    return MessageResponse(message=identity.handle_password_reset(payload.email))


@router.post("/logout", response_model=MessageResponse)
def logout(identity: IdentityClient = Depends(get_identity_client)):
    identity.sign_out()
    return MessageResponse(message="Signed out")


@router.get("/config")
def firebase_config(settings: Settings = Depends(get_app_settings)):
    return settings.firebase_web_config()
