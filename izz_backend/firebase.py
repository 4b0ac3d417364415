"""
Firebase Admin SDK initialization.
"""

from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import credentials, firestore

from izz_backend.config import Settings

logger = logging.getLogger(__name__)


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """
    Returns the default Firebase app, initializing it on first use.

    Uses the service account file from settings when given, otherwise
    application default credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    options = {
        key: value
        for key, value in {
            "projectId": settings.firebase_project_id,
            "databaseURL": settings.firebase_database_url,
            "storageBucket": settings.firebase_storage_bucket,
        }.items()
        if value
    }
    app = firebase_admin.initialize_app(cred, options)
    logger.info(
        "Firebase Admin SDK initialized for project %s",
        settings.firebase_project_id or "(default)",
    )
    return app


def firestore_client(settings: Settings):
    return firestore.client(initialize_firebase(settings))
