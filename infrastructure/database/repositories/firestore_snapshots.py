"""
Firestore Snapshot Repository
=============================

Stores greenhouse snapshots as documents in a Cloud Firestore collection,
stamped with Firestore's server timestamp. Selected with
``GREENHOUSE_STORE_BACKEND=firestore``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPIError

from app.domain.exceptions import ConfigurationError, RepositoryError
from app.utils.time import to_iso

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "greenhouse-bridge"


class FirestoreSnapshotRepository:
    """Snapshot store backed by a Firestore collection."""

    backend_name = "firestore"

    def __init__(self, client: Any, collection: str = "sensorData") -> None:
        self._client = client
        self._collection_name = collection

    @classmethod
    def from_service_account(cls, credentials_path: str, collection: str = "sensorData") -> "FirestoreSnapshotRepository":
        """Initialise the Firebase app from a service-account JSON file."""
        if not credentials_path or not Path(credentials_path).is_file():
            raise ConfigurationError(
                f"Firebase service account file not found: {credentials_path!r}. "
                "Set GREENHOUSE_FIREBASE_CREDENTIALS."
            )

        try:
            app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            app = firebase_admin.initialize_app(credentials.Certificate(credentials_path), name=FIREBASE_APP_NAME)
            logger.info("Firebase app initialised from %s", credentials_path)

        return cls(firestore.client(app), collection)

    @property
    def collection(self):
        return self._client.collection(self._collection_name)

    def add(self, document: dict[str, Any]) -> str:
        payload = dict(document)
        payload["timestamp"] = firestore.SERVER_TIMESTAMP
        try:
            _update_time, ref = self.collection.add(payload)
        except (GoogleAPIError, ValueError) as exc:
            logger.error("Firestore add to %s failed: %s", self._collection_name, exc)
            raise RepositoryError("Failed to store snapshot") from exc
        return ref.id

    def recent(self, limit: int) -> list[dict[str, Any]]:
        try:
            query = self.collection.order_by("timestamp", direction=firestore.Query.DESCENDING).limit(limit)
            docs = list(query.stream())
        except (GoogleAPIError, ValueError) as exc:
            logger.error("Firestore query on %s failed: %s", self._collection_name, exc)
            raise RepositoryError("Failed to load snapshot history") from exc

        history = []
        for doc in docs:
            data = doc.to_dict() or {}
            data["id"] = doc.id
            data["timestamp"] = to_iso(data.get("timestamp"))
            history.append(data)
        return history
