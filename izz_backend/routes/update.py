"""
Account update routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from izz_backend.dependencies import get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.schemas import MessageResponse, UpdateEmailRequest

router = APIRouter()


@router.post("/email", response_model=MessageResponse)
def update_email(
    payload: UpdateEmailRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    return MessageResponse(
        message=identity.update_user_email(payload.uid, payload.new_email)
    )


@router.post("/email/verify", response_model=MessageResponse)
def update_email_and_verify(
    payload: UpdateEmailRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Changes the signed-in user's email and sends a verification link to it.
    """
    return MessageResponse(
        message=identity.send_verification_email(payload.uid, payload.new_email)
    )
