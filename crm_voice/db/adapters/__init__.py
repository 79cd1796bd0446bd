"""
Document Store Adapters

Concrete implementations of the DocumentStore interface.
"""

from crm_voice.db.adapters.firestore import FirestoreDocumentStore
from crm_voice.db.adapters.memory import InMemoryDocumentStore

__all__ = ["FirestoreDocumentStore", "InMemoryDocumentStore"]
