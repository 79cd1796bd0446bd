"""
In-Memory Document Store Adapter

Implementation of the DocumentStore interface kept entirely in process
memory. Used for local development without cloud credentials and by
the test suite. Contents are lost on restart.
"""

import copy
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from crm_voice.db.base import Document, DocumentStore, FieldFilter

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed document store"""

    def __init__(self, seed: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        """
        Args:
            seed: Optional initial contents, ``{collection: {doc_id: data}}``
        """
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._connected = False
        for collection, documents in (seed or {}).items():
            self._collections[collection] = copy.deepcopy(documents)

    async def connect(self) -> bool:
        self._connected = True
        logger.info("Using in-memory document store")
        return True

    async def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    async def add(
        self,
        collection: str,
        data: Dict[str, Any],
        document_id: Optional[str] = None
    ) -> str:
        documents = self._collections.setdefault(collection, {})
        document_id = document_id or uuid.uuid4().hex
        if document_id in documents:
            raise ValueError(f"Document already exists: {collection}/{document_id}")
        documents[document_id] = copy.deepcopy(data)
        return document_id

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        data = self._collections.get(collection, {}).get(document_id)
        if data is None:
            return None
        return Document(id=document_id, data=copy.deepcopy(data))

    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        limit: Optional[int] = None
    ) -> List[Document]:
        results = []
        for document_id, data in self._collections.get(collection, {}).items():
            if all(self._matches(data, f) for f in filters):
                results.append(Document(id=document_id, data=copy.deepcopy(data)))
                if limit is not None and len(results) >= limit:
                    break
        return results

    def documents(self, collection: str) -> List[Document]:
        """All documents of a collection, in insertion order"""
        return [
            Document(id=document_id, data=copy.deepcopy(data))
            for document_id, data in self._collections.get(collection, {}).items()
        ]

    @staticmethod
    def _matches(data: Dict[str, Any], field_filter: FieldFilter) -> bool:
        if field_filter.field not in data:
            return False
        value = data[field_filter.field]
        if field_filter.op == "==":
            return value == field_filter.value
        if field_filter.op == "!=":
            return value != field_filter.value
        if field_filter.op == "in":
            return value in field_filter.value
        if field_filter.op == "array_contains":
            return isinstance(value, list) and field_filter.value in value
        return False
