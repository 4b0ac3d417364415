"""
Task routes. Tasks live in a subcollection under each user's profile.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from izz_backend.dependencies import get_identity_client
from izz_backend.identity import IdentityClient
from izz_backend.json_utils import convert_keys
from izz_backend.schemas import (
    ListTasksResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from izz_backend.store import DocumentRef

router = APIRouter()


def _tasks_collection(identity: IdentityClient, uid: str) -> str:
    if identity.get_user_document(uid) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return f"{identity.users_collection}/{uid}/tasks"


def _get_task_ref(identity: IdentityClient, uid: str, task_id: str) -> DocumentRef:
    ref = identity.store.document(_tasks_collection(identity, uid), task_id)
    if not identity.store.exists(ref):
        raise HTTPException(status_code=404, detail="Task not found")
    return ref


def _to_response(task_id: str, data: dict) -> TaskResponse:
    return TaskResponse(task_id=task_id, **convert_keys(data, "camel_to_snake"))


@router.get("/{uid}", response_model=ListTasksResponse)
def list_tasks(uid: str, identity: IdentityClient = Depends(get_identity_client)):
    collection = _tasks_collection(identity, uid)
    tasks = [
        _to_response(task_id, data)
        for task_id, data in identity.store.list(collection, limit=500)
    ]
    return ListTasksResponse(tasks=tasks)


@router.post("/{uid}", response_model=TaskResponse, status_code=201)
def create_task(
    uid: str,
    payload: TaskCreateRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    collection = _tasks_collection(identity, uid)
    data = convert_keys(payload.model_dump(), "snake_to_camel")
    data["createdAt"] = datetime.now(timezone.utc)
    ref = identity.store.add(collection, data)
    return _to_response(ref.document_id, data)


@router.patch("/{uid}/{task_id}", response_model=TaskResponse)
def update_task(
    uid: str,
    task_id: str,
    payload: TaskUpdateRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    ref = _get_task_ref(identity, uid, task_id)
    # A null field is left unchanged.
    changes = convert_keys(
        payload.model_dump(exclude_unset=True, exclude_none=True), "snake_to_camel"
    )
    if changes:
        identity.store.set(ref, changes, merge=True)
    return _to_response(task_id, identity.store.get(ref))


@router.delete("/{uid}/{task_id}", status_code=204)
def delete_task(
    uid: str,
    task_id: str,
    identity: IdentityClient = Depends(get_identity_client),
):
    ref = _get_task_ref(identity, uid, task_id)
    identity.store.delete(ref)
