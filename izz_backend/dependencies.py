"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Request

from izz_backend.config import Settings, get_settings
from izz_backend.firebase import firestore_client
from izz_backend.identity import IdentityClient
from izz_backend.providers import (
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from izz_backend.store import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore

_identity_provider: IdentityProvider | None = None
_document_store: DocumentStore | None = None
_identity_client: IdentityClient | None = None


def get_identity_provider() -> IdentityProvider:
    """
    Return a singleton provider; its signed-in session is process wide.
    """
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.firebase_api_key:
        _identity_provider = InMemoryIdentityProvider()
    else:
        _identity_provider = FirebaseIdentityProvider(
            settings.firebase_api_key,
            timeout=settings.identity_request_timeout,
        )
    return _identity_provider


def get_document_store() -> DocumentStore:
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.firebase_project_id:
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = FirestoreDocumentStore(firestore_client(settings))
    return _document_store


def get_identity_client() -> IdentityClient:
    global _identity_client
    if _identity_client:
        return _identity_client

    _identity_client = IdentityClient(
        provider=get_identity_provider(),
        store=get_document_store(),
        users_collection=get_settings().users_collection,
    )
    return _identity_client


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()
