from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from ..errors import CatalogError, ConfigurationError
from .models import CATALOG_COLLECTIONS, ToolProfile
from .store import parse_records

logger = logging.getLogger(__name__)

_APP_NAME = "stackfast"


def decode_service_account(encoded_key: str | None) -> dict[str, Any]:
    """Decode a base64 service-account JSON blob and check it names a project."""
    if not encoded_key:
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT_KEY is not set")
    try:
        decoded = base64.b64decode(encoded_key, validate=True).decode("utf-8")
        info = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT_KEY is not base64-encoded JSON") from exc
    if not isinstance(info, dict) or not info.get("project_id"):
        raise ConfigurationError("Parsed service account is missing 'project_id'")
    return info


def firestore_client_from_key(encoded_key: str | None) -> Any:
    info = decode_service_account(encoded_key)
    try:
        app = firebase_admin.get_app(_APP_NAME)
    except ValueError:
        app = firebase_admin.initialize_app(credentials.Certificate(info), name=_APP_NAME)
        logger.info("Firebase Admin SDK initialized for project %s", info["project_id"])
    return firestore.client(app)


class FirestoreCatalogStore:
    """Catalog read from one Firestore collection per category family."""

    def __init__(self, client: Any, collections: list[str] | None = None) -> None:
        self.client = client
        self.collections = collections or list(CATALOG_COLLECTIONS)

    def load_tools(self) -> list[ToolProfile]:
        records: list[dict[str, Any]] = []
        for name in self.collections:
            try:
                docs = list(self.client.collection(name).stream())
            except Exception as exc:
                raise CatalogError(f"Firestore collection {name!r} could not be read") from exc
            for doc in docs:
                data = doc.to_dict() or {}
                data.setdefault("id", doc.id)
                records.append(data)

        tools = parse_records(records, "firestore")
        logger.info("Loaded %d tools from %d Firestore collections", len(tools), len(self.collections))
        return tools
