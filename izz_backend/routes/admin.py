"""
Admin routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from izz_backend.dependencies import get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.schemas import ListProfilesResponse, ProfileResponse

router = APIRouter()


@router.get("/users", response_model=ListProfilesResponse)
def list_users(
    limit: int = Query(100, ge=1, le=500),
    identity: IdentityClient = Depends(get_identity_client),
):
    users = [
        ProfileResponse(uid=uid, profile=profile)
        for uid, profile in identity.list_user_documents(limit=limit)
    ]
    return ListProfilesResponse(users=users)
