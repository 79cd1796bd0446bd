"""
Firestore Document Store Adapter

Implementation of the DocumentStore interface for Cloud Firestore, using
the async client from google-cloud-firestore. Credentials come from
Application Default Credentials.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter as FirestoreFieldFilter

from crm_voice.core.config import settings
from crm_voice.core.exceptions import DocumentStoreError
from crm_voice.db.base import Document, DocumentStore, FieldFilter

logger = logging.getLogger(__name__)


class FirestoreDocumentStore(DocumentStore):
    """
    Cloud Firestore adapter.

    One AsyncClient is created on connect() and shared by every request
    until disconnect().
    """

    def __init__(self, project_id: Optional[str] = None, database: Optional[str] = None):
        """
        Args:
            project_id: GCP project (defaults to settings.firestore_project_id,
                        then to the ambient project of the credentials)
            database: Firestore database id (defaults to "(default)")
        """
        self.project_id = project_id or settings.firestore_project_id
        self.database = database or settings.firestore_database
        self._client: Optional[firestore.AsyncClient] = None

    async def connect(self) -> bool:
        """Create the Firestore client."""
        client_kwargs: Dict[str, Any] = {}
        if self.project_id:
            client_kwargs["project"] = self.project_id
        if self.database:
            client_kwargs["database"] = self.database

        try:
            self._client = firestore.AsyncClient(**client_kwargs)
            logger.info(f"Connected to Firestore project: {self._client.project}")
            return True
        except Exception as e:
            logger.error(f"Failed to create Firestore client: {e}")
            self._client = None
            return False

    async def disconnect(self) -> None:
        if self._client is not None:
            self._client = None
            logger.info("Disconnected from Firestore")

    def is_connected(self) -> bool:
        return self._client is not None

    async def add(
        self,
        collection: str,
        data: Dict[str, Any],
        document_id: Optional[str] = None
    ) -> str:
        collection_ref = self._collection(collection)
        try:
            if document_id:
                await collection_ref.document(document_id).create(data)
                return document_id
            _, document_ref = await collection_ref.add(data)
            return document_ref.id
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(str(e), operation=f"add {collection}") from e

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        try:
            snapshot = await self._collection(collection).document(document_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(str(e), operation=f"get {collection}") from e

        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        limit: Optional[int] = None
    ) -> List[Document]:
        query = self._collection(collection)
        for field_filter in filters:
            query = query.where(
                filter=FirestoreFieldFilter(field_filter.field, field_filter.op, field_filter.value)
            )
        if limit is not None:
            query = query.limit(limit)

        try:
            return [
                Document(id=snapshot.id, data=snapshot.to_dict() or {})
                async for snapshot in query.stream()
            ]
        except google_exceptions.GoogleAPICallError as e:
            raise DocumentStoreError(str(e), operation=f"query {collection}") from e

    def _collection(self, path: str):
        if self._client is None:
            raise DocumentStoreError("Not connected to Firestore")
        return self._client.collection(path)
