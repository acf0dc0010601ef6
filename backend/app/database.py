"""Firebase Admin app and async Firestore client construction."""

import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud.firestore import AsyncClient

from app.config import settings

logger = logging.getLogger(__name__)


def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase Admin app, initializing it on first use.

    Uses the service account JSON from ``FIREBASE_SERVICE_ACCOUNT_KEY`` when
    present, otherwise application default credentials (gcloud / GCP runtime).
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None

    if settings.firebase_service_account_key:
        try:
            cred = credentials.Certificate(json.loads(settings.firebase_service_account_key))
        except ValueError:
            logger.error("Failed to parse Firebase service account, using default credentials")
            cred = None
    else:
        cred = None

    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase Admin initialized (project=%s)", settings.firebase_project_id or "default")
    return app


def create_firestore_client() -> AsyncClient:
    """Create an async Firestore client bound to the Firebase Admin app."""
    client = firestore_async.client(app=get_firebase_app())
    logger.info("Firestore async client initialized")
    return client
