"""
Dashboard data routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from izz_backend.dependencies import get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.schemas import ProfileResponse

router = APIRouter()


@router.get("/profile/{uid}", response_model=ProfileResponse)
def get_profile(uid: str, identity: IdentityClient = Depends(get_identity_client)):
    profile = identity.get_user_document(uid)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse(uid=uid, profile=profile)
