"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from typing import Dict, Optional, Protocol


@dataclass(frozen=True)
class DocumentRef:
    """Location of a document: a collection path plus a document id."""

    collection: str
    document_id: str

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.document_id}"


class DocumentStore(Protocol):
    """Interface for document access."""

    def document(self, collection: str, document_id: str) -> DocumentRef:
        ...

    def get(self, ref: DocumentRef) -> Optional[dict]:
        ...

    def exists(self, ref: DocumentRef) -> bool:
        ...

    def set(self, ref: DocumentRef, data: dict, *, merge: bool = False) -> None:
        ...

    def add(self, collection: str, data: dict) -> DocumentRef:
        ...

    def list(self, collection: str, limit: int = 100) -> list[tuple[str, dict]]:
        ...

    def delete(self, ref: DocumentRef) -> None:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def reset(self) -> None:
        self.collections.clear()

    def document(self, collection: str, document_id: str) -> DocumentRef:
        return DocumentRef(collection=collection, document_id=document_id)

    def get(self, ref: DocumentRef) -> Optional[dict]:
        data = self.collections.get(ref.collection, {}).get(ref.document_id)
        return copy.deepcopy(data) if data is not None else None

    def exists(self, ref: DocumentRef) -> bool:
        return ref.document_id in self.collections.get(ref.collection, {})

    def set(self, ref: DocumentRef, data: dict, *, merge: bool = False) -> None:
        docs = self.collections.setdefault(ref.collection, {})
        if merge and ref.document_id in docs:
            docs[ref.document_id].update(copy.deepcopy(data))
        else:
            docs[ref.document_id] = copy.deepcopy(data)

    def add(self, collection: str, data: dict) -> DocumentRef:
        ref = self.document(collection, uuid.uuid4().hex[:20])
        self.set(ref, data)
        return ref

    def list(self, collection: str, limit: int = 100) -> list[tuple[str, dict]]:
        docs = self.collections.get(collection, {})
        return [
            (doc_id, copy.deepcopy(data))
            for doc_id, data in list(docs.items())[:limit]
        ]

    def delete(self, ref: DocumentRef) -> None:
        self.collections.get(ref.collection, {}).pop(ref.document_id, None)


class FirestoreDocumentStore:
    """
    Firestore-backed store. `client` is a `google.cloud.firestore.Client`,
    normally obtained from `firebase_admin.firestore.client()`.
    """

    def __init__(self, client):
        self._client = client

    def _doc(self, ref: DocumentRef):
        return self._client.collection(ref.collection).document(ref.document_id)

    def document(self, collection: str, document_id: str) -> DocumentRef:
        return DocumentRef(collection=collection, document_id=document_id)

    def get(self, ref: DocumentRef) -> Optional[dict]:
        snapshot = self._doc(ref).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def exists(self, ref: DocumentRef) -> bool:
        return self._doc(ref).get().exists

    def set(self, ref: DocumentRef, data: dict, *, merge: bool = False) -> None:
        self._doc(ref).set(data, merge=merge)

    def add(self, collection: str, data: dict) -> DocumentRef:
        _, doc_ref = self._client.collection(collection).add(data)
        return DocumentRef(collection=collection, document_id=doc_ref.id)

    def list(self, collection: str, limit: int = 100) -> list[tuple[str, dict]]:
        snapshots = self._client.collection(collection).limit(limit).stream()
        return [(snapshot.id, snapshot.to_dict()) for snapshot in snapshots]

    def delete(self, ref: DocumentRef) -> None:
        self._doc(ref).delete()
