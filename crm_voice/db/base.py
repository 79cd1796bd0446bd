"""
Document Store Base Classes

This module defines the abstract interface that all document store
adapters must implement, so the hosted store (Firestore) can be swapped
for the in-memory store in development and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

SUPPORTED_OPERATORS = ("==", "!=", "in", "array_contains")


@dataclass(frozen=True)
class FieldFilter:
    """A single ``field <op> value`` condition of a collection query"""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass
class Document:
    """A stored document: its id within the collection and its fields"""
    id: str
    data: Dict[str, Any]


class DocumentStore(ABC):
    """
    Abstract base class for document store adapters.

    Collections are addressed by slash-separated paths, so
    ``leads/<lead id>/calls`` names a subcollection.
    """

    @abstractmethod
    async def connect(self) -> bool:
        """
        Establish the connection to the store.
        Returns True if successful, False otherwise.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the store is usable."""
        pass

    @abstractmethod
    async def add(
        self,
        collection: str,
        data: Dict[str, Any],
        document_id: Optional[str] = None
    ) -> str:
        """
        Create a new document and return its id.

        Creation only: an existing document is never overwritten.
        """
        pass

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Fetch one document by id."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        limit: Optional[int] = None
    ) -> List[Document]:
        """Return documents matching every filter."""
        pass
